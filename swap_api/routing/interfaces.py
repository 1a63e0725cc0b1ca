"""Contract between the quote assembler and the external routing engine.

The routing engine owns liquidity discovery and route optimization. This
service only consumes its output: priced quotes, sampled liquidity curves
and the calldata that executes a quote.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from swap_api.constants import (
    DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE,
    MARKET_DEPTH_DEFAULT_DISTRIBUTION,
    MARKET_DEPTH_MAX_SAMPLES,
)
from swap_api.gas.overhead import GasOverheadTable
from swap_api.market_depth import MarketDepth
from swap_api.models.quote import PreparedTransaction, SwapQuote
from swap_api.models.swap import AffiliateFeeAmounts, MarketOperation
from swap_api.sources import ERC20BridgeSource


@dataclass(frozen=True)
class SwapQuoteOptions:
    """Options passed to the routing engine for one quote.

    Attributes:
        slippage_percentage: Worst-case slippage the quote must tolerate
        gas_price: Gas price to price the route at (None: engine default)
        excluded_sources: Sources the route must not use
        included_sources: If non-empty, the only sources the route may use
        excluded_fee_sources: Sources not sampled for fee pricing
        exchange_proxy_overhead: Overhead charged per source combination
        include_price_comparisons: Whether to return single-source comparisons
    """

    slippage_percentage: Decimal = DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE
    gas_price: int | None = None
    excluded_sources: frozenset[ERC20BridgeSource] = frozenset()
    included_sources: frozenset[ERC20BridgeSource] = frozenset()
    excluded_fee_sources: frozenset[ERC20BridgeSource] = frozenset()
    exchange_proxy_overhead: GasOverheadTable = field(default_factory=GasOverheadTable)
    include_price_comparisons: bool = False


@dataclass(frozen=True)
class MarketDepthOptions:
    num_samples: int = MARKET_DEPTH_MAX_SAMPLES
    sample_distribution_base: Decimal = MARKET_DEPTH_DEFAULT_DISTRIBUTION
    excluded_sources: frozenset[ERC20BridgeSource] = frozenset()
    included_sources: frozenset[ERC20BridgeSource] = frozenset()


@dataclass(frozen=True)
class CalldataOptions:
    """How the calldata for a quote should be built."""

    is_from_eth: bool = False
    is_to_eth: bool = False
    is_meta_transaction: bool = False
    should_sell_entire_balance: bool = False
    affiliate_fee: AffiliateFeeAmounts = field(default_factory=AffiliateFeeAmounts)


class RoutingEngine(Protocol):
    """External routing engine."""

    async def get_quote(
        self,
        buy_token: str,
        sell_token: str,
        amount: int,
        side: MarketOperation,
        options: SwapQuoteOptions,
    ) -> SwapQuote:
        """Find and price the best route for a trade.

        Raises:
            Exception: With a message starting with ``INSUFFICIENT_ASSET_LIQUIDITY``,
                ``NO_OPTIMAL_PATH`` or ``ASSET_UNAVAILABLE`` for known failures
        """
        ...

    async def get_liquidity_curve(
        self,
        buy_token: str,
        sell_token: str,
        amount: int,
        options: MarketDepthOptions,
    ) -> MarketDepth:
        """Sample bid and ask liquidity for a token pair."""
        ...

    async def get_calldata(
        self, quote: SwapQuote, options: CalldataOptions
    ) -> PreparedTransaction:
        """Encode the exchange call that executes a quote."""
        ...

    async def get_gas_price(self) -> int:
        """Current gas price in wei."""
        ...


def load_routing_engine(factory_path: str, **kwargs: Any) -> RoutingEngine:
    """Build a routing engine from a ``module:callable`` path.

    Args:
        factory_path: e.g. ``"my_router.engine:create_engine"``
        **kwargs: Passed to the factory

    Returns:
        The engine returned by the factory

    Raises:
        ValueError: If the path is malformed or does not name a callable
    """
    module_name, sep, attr = factory_path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Routing engine factory must be 'module:callable', got {factory_path!r}")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ValueError(f"{factory_path!r} is not callable")
    engine: RoutingEngine = factory(**kwargs)
    return engine
