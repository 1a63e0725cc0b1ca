"""Routing-engine output consumed by the quote assembler.

A ``SwapQuote`` is produced by the external routing engine and treated as an
immutable value for the lifetime of one request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from swap_api.models.swap import MarketOperation
from swap_api.sources import ERC20BridgeSource

# Sources whose fill amounts are only known at execution time
UNDETERMINISTIC_SOURCES = frozenset({ERC20BridgeSource.NATIVE, ERC20BridgeSource.MULTI_BRIDGE})


@dataclass(frozen=True)
class QuoteInfo:
    """Amounts for one case (best or worst) of a quote.

    Attributes:
        output_amount: Buy token amount received (maker amount)
        input_amount: Sell token amount spent, excluding order fees
        total_input_amount: Sell token amount spent, including order fees
        protocol_fee: Protocol fee in wei
        gas: Gas used by the route
    """

    output_amount: int
    input_amount: int
    total_input_amount: int
    protocol_fee: int = 0
    gas: int = 0


@dataclass(frozen=True)
class Fill:
    source: ERC20BridgeSource
    input_amount: int
    output_amount: int


@dataclass(frozen=True)
class QuoteOrder:
    """One constituent order of a quote and the fills it aggregates."""

    maker_token: str
    taker_token: str
    maker_amount: int
    taker_amount: int
    fills: tuple[Fill, ...] = ()


@dataclass(frozen=True)
class MultiHopBreakdown:
    proportion: Decimal
    intermediate_token: str
    hops: tuple[ERC20BridgeSource, ...]


@dataclass(frozen=True)
class SourceComparison:
    """Result of filling the whole trade from a single source."""

    name: ERC20BridgeSource
    price: Decimal | None = None
    gas: int | None = None
    savings_in_eth: Decimal | None = None
    buy_amount: int | None = None
    sell_amount: int | None = None


@dataclass(frozen=True)
class SwapQuote:
    """A priced route returned by the routing engine.

    ``buy_token_per_eth``/``sell_token_per_eth`` are expressed in base units of
    the token per base unit of the wrapped native token.
    """

    sell_token: str
    buy_token: str
    sell_token_decimals: int
    buy_token_decimals: int
    type: MarketOperation
    best_case_quote_info: QuoteInfo
    worst_case_quote_info: QuoteInfo
    gas_price: int
    source_breakdown: Mapping[ERC20BridgeSource, Decimal | MultiHopBreakdown] = field(
        default_factory=lambda: MappingProxyType({})
    )
    orders: tuple[QuoteOrder, ...] = ()
    sell_token_per_eth: Decimal = Decimal(0)
    buy_token_per_eth: Decimal = Decimal(0)
    price_comparisons: tuple[SourceComparison, ...] = ()

    @property
    def fill_sources(self) -> frozenset[ERC20BridgeSource]:
        return frozenset(f.source for o in self.orders for f in o.fills)

    @property
    def has_undeterministic_fills(self) -> bool:
        """Whether any fill comes from a source whose execution cost can vary."""
        return bool(self.fill_sources & UNDETERMINISTIC_SOURCES)


@dataclass(frozen=True)
class PreparedTransaction:
    """Unsigned transaction body before final gas is attached."""

    to: str
    data: str
    value: int
    gas_overhead: int = 0
