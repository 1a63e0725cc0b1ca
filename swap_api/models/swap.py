"""Request-side domain models for swap quotes and market depth."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum, IntEnum

from swap_api.constants import DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE, NULL_ADDRESS
from swap_api.sources import ERC20BridgeSource


class MarketOperation(str, Enum):
    """Which side of the trade the requested amount is fixed on."""

    SELL = "Sell"
    BUY = "Buy"


class AffiliateFeeType(IntEnum):
    NONE = 0
    PERCENTAGE_FEE = 1
    POSITIVE_SLIPPAGE_FEE = 2


@dataclass(frozen=True)
class AffiliateFee:
    """Affiliate fee requested for a single quote.

    Attributes:
        fee_type: How the fee is taken
        recipient: Address receiving the fee
        buy_token_percentage_fee: Fee as a fraction of the buy amount (0.01 = 1%)
        sell_token_percentage_fee: Always zero; sell-side fees are not supported
    """

    fee_type: AffiliateFeeType = AffiliateFeeType.NONE
    recipient: str = NULL_ADDRESS
    buy_token_percentage_fee: Decimal = Decimal(0)
    sell_token_percentage_fee: Decimal = Decimal(0)

    @classmethod
    def none(cls) -> AffiliateFee:
        return cls()


@dataclass(frozen=True)
class AffiliateFeeAmounts:
    """Fee amounts taken from each side plus the gas they add."""

    sell_token_fee_amount: int = 0
    buy_token_fee_amount: int = 0
    gas_cost: int = 0


@dataclass(frozen=True)
class GetSwapQuoteParams:
    """A fully parsed swap quote request.

    Token addresses are lowercase. Native-asset requests carry the wrapped
    native token address together with ``is_eth_sell``/``is_eth_buy``.
    """

    chain_id: int
    sell_token: str
    buy_token: str
    sell_amount: int | None = None
    buy_amount: int | None = None
    taker_address: str | None = None
    slippage_percentage: Decimal = DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE
    gas_price: int | None = None
    excluded_sources: frozenset[ERC20BridgeSource] = frozenset()
    included_sources: frozenset[ERC20BridgeSource] = frozenset()
    affiliate_address: str | None = None
    affiliate_fee: AffiliateFee = field(default_factory=AffiliateFee)
    is_eth_sell: bool = False
    is_eth_buy: bool = False
    is_wrap: bool = False
    is_unwrap: bool = False
    is_meta_transaction: bool = False
    skip_validation: bool = False
    include_price_comparisons: bool = False
    should_sell_entire_balance: bool = False

    def with_skip_validation(self) -> GetSwapQuoteParams:
        return replace(self, skip_validation=True)

    @property
    def side(self) -> MarketOperation:
        return MarketOperation.SELL if self.sell_amount is not None else MarketOperation.BUY

    @property
    def amount(self) -> int:
        amount = self.sell_amount if self.sell_amount is not None else self.buy_amount
        if amount is None:
            raise ValueError("Quote request has neither sellAmount nor buyAmount")
        return amount


@dataclass(frozen=True)
class CalculateMarketDepthParams:
    buy_token: str
    sell_token: str
    sell_amount: int
    num_samples: int
    sample_distribution_base: Decimal
    excluded_sources: frozenset[ERC20BridgeSource] = frozenset()
    included_sources: frozenset[ERC20BridgeSource] = frozenset()
