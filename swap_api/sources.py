"""Liquidity source identifiers.

Names match the on-the-wire source names used in request parameters
(``excludedSources``/``includedSources``) and in the ``sources`` breakdown.
"""

from enum import Enum


class ERC20BridgeSource(str, Enum):
    """A liquidity source the routing engine can fill from."""

    NATIVE = "Native"
    UNISWAP = "Uniswap"
    UNISWAP_V2 = "Uniswap_V2"
    UNISWAP_V3 = "Uniswap_V3"
    ETH2DAI = "Eth2Dai"
    KYBER = "Kyber"
    CURVE = "Curve"
    CURVE_V2 = "Curve_V2"
    LIQUIDITY_PROVIDER = "LiquidityProvider"
    MULTI_BRIDGE = "MultiBridge"
    BALANCER = "Balancer"
    BALANCER_V2 = "Balancer_V2"
    CREAM = "CREAM"
    BANCOR = "Bancor"
    MAKER_PSM = "MakerPsm"
    MSTABLE = "mStable"
    MOONISWAP = "Mooniswap"
    MULTI_HOP = "MultiHop"
    SHELL = "Shell"
    SUSHISWAP = "SushiSwap"
    DODO = "DODO"
    DODO_V2 = "DODO_V2"
    CRYPTO_COM = "CryptoCom"
    KYBER_DMM = "KyberDMM"
    SMOOTHY = "Smoothy"
    SADDLE = "Saddle"
    LIDO = "Lido"
    SHIBASWAP = "ShibaSwap"
    CLIPPER = "Clipper"
    # BSC
    PANCAKESWAP = "PancakeSwap"
    PANCAKESWAP_V2 = "PancakeSwap_V2"
    BAKERYSWAP = "BakerySwap"
    NERVE = "Nerve"
    ELLIPSIS = "Ellipsis"
    APESWAP = "ApeSwap"
    CAFESWAP = "CafeSwap"
    CHEESESWAP = "CheeseSwap"
    JULSWAP = "JulSwap"
    WAULTSWAP = "WaultSwap"
    # Polygon
    QUICKSWAP = "QuickSwap"
    COMETHSWAP = "ComethSwap"
    DFYN = "Dfyn"
    # Avalanche
    PANGOLIN = "Pangolin"
    TRADER_JOE = "TraderJoe"
    # Celo
    UBESWAP = "Ubeswap"
    # Fantom
    SPIRITSWAP = "SpiritSwap"
    SPOOKYSWAP = "SpookySwap"
    BEETHOVENX = "Beethovenx"

    def __str__(self) -> str:
        return self.value


ALL_SOURCES: frozenset[ERC20BridgeSource] = frozenset(ERC20BridgeSource)

# Name shown for native (order book) liquidity in responses
NATIVE_SOURCE_DISPLAY_NAME = "0x"


def parse_source(name: str) -> ERC20BridgeSource:
    """Look up a source by its wire name.

    Raises:
        ValueError: If the name is not a known source
    """
    return ERC20BridgeSource(name)


def source_display_name(source: ERC20BridgeSource) -> str:
    """Name of a source as it appears in the ``sources`` breakdown."""
    if source is ERC20BridgeSource.NATIVE:
        return NATIVE_SOURCE_DISPLAY_NAME
    return source.value
