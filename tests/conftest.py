"""Pytest configuration and fixtures."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from swap_api.chains import ChainConfig, ChainId, get_chain_config
from swap_api.market_depth import MarketDepth
from swap_api.models.quote import PreparedTransaction, SwapQuote
from swap_api.models.swap import MarketOperation
from swap_api.routing.interfaces import CalldataOptions, MarketDepthOptions, SwapQuoteOptions
from swap_api.rpc.client import StateOverride, TxData
from swap_api.tokens import TokenRegistry
from tests.helpers import EXCHANGE_PROXY, FAKE_TAKER_BYTECODE, make_quote

# =============================================================================
# Fake node
# =============================================================================


@dataclass
class FakeNode:
    """In-memory NodeClient with scripted answers.

    Set ``*_error`` to make the corresponding method raise instead of answer.
    Every call is recorded for assertions.
    """

    gas_estimate: int = 100_000
    gas_price: int = 50 * 10**9
    call_result: str = "0x"
    estimate_error: Exception | None = None
    call_error: Exception | None = None
    estimate_calls: list[TxData] = field(default_factory=list)
    calls: list[tuple[TxData, Mapping[str, StateOverride] | None]] = field(default_factory=list)

    async def estimate_gas(self, tx: TxData) -> int:
        self.estimate_calls.append(tx)
        if self.estimate_error is not None:
            raise self.estimate_error
        return self.gas_estimate

    async def get_gas_price(self) -> int:
        return self.gas_price

    async def call(
        self, tx: TxData, overrides: Mapping[str, StateOverride] | None = None
    ) -> str:
        self.calls.append((tx, overrides))
        if self.call_error is not None:
            raise self.call_error
        return self.call_result


# =============================================================================
# Fake routing engine
# =============================================================================


@dataclass
class FakeRoutingEngine:
    """RoutingEngine returning canned quotes, calldata and depth."""

    quote: SwapQuote = field(default_factory=make_quote)
    prepared: PreparedTransaction = field(
        default_factory=lambda: PreparedTransaction(to=EXCHANGE_PROXY, data="0xabcdef", value=0)
    )
    depth: MarketDepth | None = None
    gas_price: int = 40 * 10**9
    quote_error: Exception | None = None
    quote_calls: list[tuple[str, str, int, MarketOperation, SwapQuoteOptions]] = field(
        default_factory=list
    )
    calldata_calls: list[CalldataOptions] = field(default_factory=list)
    depth_calls: list[MarketDepthOptions] = field(default_factory=list)

    async def get_quote(
        self,
        buy_token: str,
        sell_token: str,
        amount: int,
        side: MarketOperation,
        options: SwapQuoteOptions,
    ) -> SwapQuote:
        self.quote_calls.append((buy_token, sell_token, amount, side, options))
        if self.quote_error is not None:
            raise self.quote_error
        return self.quote

    async def get_liquidity_curve(
        self, buy_token: str, sell_token: str, amount: int, options: MarketDepthOptions
    ) -> MarketDepth:
        self.depth_calls.append(options)
        if self.depth is None:
            return MarketDepth(asks=[], bids=[], maker_token_decimals=18, taker_token_decimals=18)
        return self.depth

    async def get_calldata(self, quote: SwapQuote, options: CalldataOptions) -> PreparedTransaction:
        self.calldata_calls.append(options)
        return self.prepared

    async def get_gas_price(self) -> int:
        return self.gas_price


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mainnet() -> ChainConfig:
    """Mainnet configuration with override simulation enabled."""
    return get_chain_config(ChainId.MAINNET, fake_taker_bytecode=FAKE_TAKER_BYTECODE)


@pytest.fixture
def registry(mainnet: ChainConfig) -> TokenRegistry:
    return TokenRegistry(mainnet)


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def fake_engine() -> FakeRoutingEngine:
    return FakeRoutingEngine()
