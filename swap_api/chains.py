"""Per-chain configuration.

Everything that varies by chain lives here: the exchange proxy address,
native and wrapped-native tokens, which liquidity sources are offered or
excluded, wrap/unwrap gas and the exchange-proxy gas overhead tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from swap_api.constants import (
    DEFAULT_EXCHANGE_PROXY,
    FANTOM_WRAP_UNWRAP_GAS,
    PAY_TAKER_TRANSFORMER_NONCE,
    WRAP_UNWRAP_GAS,
)
from swap_api.gas.overhead import (
    GasOverheadTable,
    build_no_vip_overhead_table,
    build_vip_overhead_table,
)
from swap_api.models.types import normalize_address
from swap_api.sources import ALL_SOURCES, ERC20BridgeSource


class ChainId(IntEnum):
    MAINNET = 1
    ROPSTEN = 3
    RINKEBY = 4
    OPTIMISM = 10
    KOVAN = 42
    BSC = 56
    MATIC = 137
    FANTOM = 250
    GANACHE = 1337
    CELO = 42220
    AVALANCHE = 43114


_S = ERC20BridgeSource

# Sources the routing engine samples on each chain
SELL_SOURCES: dict[ChainId, tuple[ERC20BridgeSource, ...]] = {
    ChainId.MAINNET: (
        _S.NATIVE,
        _S.UNISWAP,
        _S.UNISWAP_V2,
        _S.UNISWAP_V3,
        _S.ETH2DAI,
        _S.KYBER,
        _S.CURVE,
        _S.CURVE_V2,
        _S.BALANCER,
        _S.BALANCER_V2,
        _S.BANCOR,
        _S.MSTABLE,
        _S.MOONISWAP,
        _S.SUSHISWAP,
        _S.SHELL,
        _S.MULTI_HOP,
        _S.DODO,
        _S.DODO_V2,
        _S.CREAM,
        _S.LIQUIDITY_PROVIDER,
        _S.CRYPTO_COM,
        _S.MAKER_PSM,
        _S.KYBER_DMM,
        _S.SMOOTHY,
        _S.SADDLE,
        _S.LIDO,
        _S.SHIBASWAP,
        _S.CLIPPER,
    ),
    ChainId.ROPSTEN: (
        _S.NATIVE,
        _S.KYBER,
        _S.SUSHISWAP,
        _S.UNISWAP,
        _S.UNISWAP_V2,
        _S.UNISWAP_V3,
        _S.CURVE,
        _S.MOONISWAP,
    ),
    ChainId.KOVAN: (_S.NATIVE, _S.UNISWAP_V2),
    ChainId.BSC: (
        _S.NATIVE,
        _S.BAKERYSWAP,
        _S.DODO,
        _S.DODO_V2,
        _S.ELLIPSIS,
        _S.MOONISWAP,
        _S.MULTI_HOP,
        _S.NERVE,
        _S.PANCAKESWAP,
        _S.PANCAKESWAP_V2,
        _S.SUSHISWAP,
        _S.SMOOTHY,
        _S.APESWAP,
        _S.CAFESWAP,
        _S.CHEESESWAP,
        _S.JULSWAP,
        _S.LIQUIDITY_PROVIDER,
        _S.WAULTSWAP,
        _S.KYBER_DMM,
    ),
    ChainId.MATIC: (
        _S.NATIVE,
        _S.SUSHISWAP,
        _S.QUICKSWAP,
        _S.COMETHSWAP,
        _S.DFYN,
        _S.MSTABLE,
        _S.CURVE,
        _S.DODO_V2,
        _S.MULTI_HOP,
        _S.WAULTSWAP,
        _S.APESWAP,
        _S.BALANCER_V2,
        _S.KYBER_DMM,
        _S.LIQUIDITY_PROVIDER,
        _S.UNISWAP_V3,
    ),
    ChainId.AVALANCHE: (
        _S.NATIVE,
        _S.MULTI_HOP,
        _S.PANGOLIN,
        _S.TRADER_JOE,
        _S.SUSHISWAP,
        _S.CURVE,
        _S.CURVE_V2,
        _S.KYBER_DMM,
        _S.LIQUIDITY_PROVIDER,
    ),
    ChainId.FANTOM: (
        _S.NATIVE,
        _S.MULTI_HOP,
        _S.BEETHOVENX,
        _S.CURVE,
        _S.CURVE_V2,
        _S.SPIRITSWAP,
        _S.SPOOKYSWAP,
        _S.SUSHISWAP,
    ),
    ChainId.CELO: (_S.NATIVE, _S.UBESWAP, _S.SUSHISWAP, _S.MULTI_HOP),
    ChainId.OPTIMISM: (_S.NATIVE, _S.UNISWAP_V3, _S.CURVE, _S.MULTI_HOP),
}

NATIVE_SYMBOLS: dict[ChainId, str] = {
    ChainId.BSC: "BNB",
    ChainId.MATIC: "MATIC",
    ChainId.AVALANCHE: "AVAX",
    ChainId.FANTOM: "FTM",
    ChainId.CELO: "CELO",
}

NATIVE_WRAPPED_SYMBOLS: dict[ChainId, str] = {
    ChainId.BSC: "WBNB",
    ChainId.MATIC: "WMATIC",
    ChainId.AVALANCHE: "WAVAX",
    ChainId.FANTOM: "WFTM",
    ChainId.CELO: "CELO",
}

WRAPPED_NATIVE_ADDRESSES: dict[ChainId, str] = {
    ChainId.MAINNET: "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
    ChainId.ROPSTEN: "0xc778417e063141139fce010982780140aa0cd5ab",
    ChainId.RINKEBY: "0xc778417e063141139fce010982780140aa0cd5ab",
    ChainId.KOVAN: "0xd0a1e359811322d97991e03f863a0c30c2cf029c",
    ChainId.OPTIMISM: "0x4200000000000000000000000000000000000006",
    ChainId.BSC: "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",
    ChainId.MATIC: "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270",
    ChainId.FANTOM: "0x21be370d5312f44cb42ce377bc9b8a0cef1a4c83",
    ChainId.GANACHE: "0x0b1ba0af832d7c05fd64161e0db78e85978e8082",
    ChainId.CELO: "0x471ece3750da237f93b8e339c536989b8978a438",
    ChainId.AVALANCHE: "0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7",
}

EXCHANGE_PROXY_ADDRESSES: dict[ChainId, str] = {
    ChainId.GANACHE: "0x5315e44798395d4a952530d131249fe00f554565",
    ChainId.OPTIMISM: "0xdef1abe32c034e558cdd535791643c58a13acc10",
    ChainId.FANTOM: "0xdef189deaef76e379df891899eb5a00a94cbc34f",
}

# Chains whose nodes do not accept eth_call state overrides
NO_STATE_OVERRIDE_CHAINS = frozenset({ChainId.GANACHE})


def _excluded_sources(chain_id: ChainId, sell_sources: tuple[ERC20BridgeSource, ...]) -> frozenset:
    if chain_id is ChainId.MAINNET:
        return frozenset({_S.MULTI_BRIDGE})
    if chain_id in (ChainId.BSC, ChainId.MATIC, ChainId.AVALANCHE, ChainId.FANTOM):
        return frozenset({_S.MULTI_BRIDGE, _S.NATIVE})
    if chain_id in (ChainId.KOVAN, ChainId.ROPSTEN):
        return ALL_SOURCES - frozenset(sell_sources)
    return ALL_SOURCES - {_S.NATIVE}


def _excluded_fee_sources(chain_id: ChainId) -> frozenset:
    if chain_id in (ChainId.MAINNET, ChainId.ROPSTEN, ChainId.MATIC):
        return frozenset()
    if chain_id in (ChainId.KOVAN, ChainId.BSC):
        return frozenset({_S.UNISWAP})
    return frozenset({_S.UNISWAP, _S.UNISWAP_V2})


@dataclass(frozen=True)
class ChainConfig:
    """Static configuration for a single chain.

    Attributes:
        chain_id: The chain this config describes
        exchange_proxy: Address of the exchange proxy (also the allowance target)
        native_symbol: Symbol of the native asset (ETH, BNB, ...)
        native_wrapped_symbol: Symbol of the wrapped native token
        wrapped_native_address: Address of the wrapped native token
        sources: Sources offered on this chain, in display order
        excluded_sources: Sources always excluded from routing
        excluded_fee_sources: Sources excluded when sampling fee prices
        wrap_unwrap_gas: Execution gas of a deposit/withdraw call
        supports_state_overrides: Whether eth_call accepts state overrides
        fake_taker_bytecode: Runtime code injected at the taker during simulation
        pay_taker_transformer_nonce: Deployment nonce of the pay-taker transformer
        vip_overhead: Gas overhead table when VIP routes are allowed
        no_vip_overhead: Gas overhead table when VIP routes are disallowed
    """

    chain_id: ChainId
    exchange_proxy: str
    native_symbol: str
    native_wrapped_symbol: str
    wrapped_native_address: str
    sources: tuple[ERC20BridgeSource, ...]
    excluded_sources: frozenset[ERC20BridgeSource]
    excluded_fee_sources: frozenset[ERC20BridgeSource]
    wrap_unwrap_gas: int = WRAP_UNWRAP_GAS
    supports_state_overrides: bool = True
    fake_taker_bytecode: str = ""
    pay_taker_transformer_nonce: int = PAY_TAKER_TRANSFORMER_NONCE
    vip_overhead: GasOverheadTable = field(default_factory=build_vip_overhead_table)
    no_vip_overhead: GasOverheadTable = field(default_factory=build_no_vip_overhead_table)

    @property
    def uses_state_overrides(self) -> bool:
        """Whether gas simulation should inject the fake taker."""
        return self.supports_state_overrides and bool(self.fake_taker_bytecode)


def get_chain_config(
    chain_id: int,
    *,
    exchange_proxy: str | None = None,
    fake_taker_bytecode: str = "",
) -> ChainConfig:
    """Build the configuration for a chain.

    Args:
        chain_id: Numeric chain id
        exchange_proxy: Override for the exchange proxy address
        fake_taker_bytecode: Hex runtime code of the fake taker contract

    Returns:
        The chain configuration

    Raises:
        ValueError: If the chain is not supported
    """
    try:
        chain = ChainId(chain_id)
    except ValueError as err:
        raise ValueError(f"Unsupported chain id: {chain_id}") from err

    sell_sources = SELL_SOURCES.get(chain, (_S.NATIVE,))
    proxy = exchange_proxy or EXCHANGE_PROXY_ADDRESSES.get(chain, DEFAULT_EXCHANGE_PROXY)
    return ChainConfig(
        chain_id=chain,
        exchange_proxy=normalize_address(proxy, validate=True),
        native_symbol=NATIVE_SYMBOLS.get(chain, "ETH"),
        native_wrapped_symbol=NATIVE_WRAPPED_SYMBOLS.get(chain, "WETH"),
        wrapped_native_address=WRAPPED_NATIVE_ADDRESSES.get(
            chain, WRAPPED_NATIVE_ADDRESSES[ChainId.MAINNET]
        ),
        sources=sell_sources,
        excluded_sources=_excluded_sources(chain, sell_sources),
        excluded_fee_sources=_excluded_fee_sources(chain),
        wrap_unwrap_gas=FANTOM_WRAP_UNWRAP_GAS if chain is ChainId.FANTOM else WRAP_UNWRAP_GAS,
        supports_state_overrides=chain not in NO_STATE_OVERRIDE_CHAINS,
        fake_taker_bytecode=fake_taker_bytecode,
        vip_overhead=build_vip_overhead_table(is_bsc=chain is ChainId.BSC),
    )


__all__ = [
    "ChainConfig",
    "ChainId",
    "get_chain_config",
]
