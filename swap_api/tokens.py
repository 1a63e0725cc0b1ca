"""Static token metadata registry.

Resolves request tokens given either as a symbol ("DAI") or as an address,
and answers the native / wrapped-native questions the request parser asks.
"""

from __future__ import annotations

from dataclasses import dataclass

from swap_api.chains import ChainConfig, ChainId
from swap_api.constants import ETH_TOKEN_ADDRESS
from swap_api.models.types import is_valid_address, normalize_address


@dataclass(frozen=True)
class TokenMetadata:
    symbol: str
    name: str
    decimals: int
    token_address: str


_C = ChainId

_REGISTRY: dict[ChainId, tuple[TokenMetadata, ...]] = {
    _C.MAINNET: (
        TokenMetadata("WETH", "Wrapped Ether", 18, "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"),
        TokenMetadata("DAI", "Dai Stablecoin", 18, "0x6b175474e89094c44da98b954eedeac495271d0f"),
        TokenMetadata("USDC", "USD Coin", 6, "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"),
        TokenMetadata("USDT", "Tether USD", 6, "0xdac17f958d2ee523a2206206994597c13d831ec7"),
        TokenMetadata("WBTC", "Wrapped Bitcoin", 8, "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"),
        TokenMetadata("ZRX", "0x Protocol Token", 18, "0xe41d2489571d322189246dafa5ebde1f4699f498"),
        TokenMetadata("LINK", "ChainLink Token", 18, "0x514910771af9ca656af840dff83e8264ecf986ca"),
        TokenMetadata("MKR", "Maker", 18, "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2"),
        TokenMetadata("UNI", "Uniswap", 18, "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984"),
    ),
    _C.ROPSTEN: (
        TokenMetadata("WETH", "Wrapped Ether", 18, "0xc778417e063141139fce010982780140aa0cd5ab"),
    ),
    _C.RINKEBY: (
        TokenMetadata("WETH", "Wrapped Ether", 18, "0xc778417e063141139fce010982780140aa0cd5ab"),
    ),
    _C.KOVAN: (
        TokenMetadata("WETH", "Wrapped Ether", 18, "0xd0a1e359811322d97991e03f863a0c30c2cf029c"),
        TokenMetadata("DAI", "Dai Stablecoin", 18, "0x4f96fe3b7a6cf9725f59d353f723c1bdb64ca6aa"),
    ),
    _C.OPTIMISM: (
        TokenMetadata("WETH", "Wrapped Ether", 18, "0x4200000000000000000000000000000000000006"),
    ),
    _C.BSC: (
        TokenMetadata("WBNB", "Wrapped BNB", 18, "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c"),
        TokenMetadata("BUSD", "Binance USD", 18, "0xe9e7cea3dedca5984780bafc599bd69add087d56"),
    ),
    _C.MATIC: (
        TokenMetadata("WMATIC", "Wrapped Matic", 18, "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270"),
        TokenMetadata("USDC", "USD Coin", 6, "0x2791bca1f2de4661ed88a30c99a7a9449aa84174"),
    ),
    _C.FANTOM: (
        TokenMetadata("WFTM", "Wrapped Fantom", 18, "0x21be370d5312f44cb42ce377bc9b8a0cef1a4c83"),
    ),
    _C.AVALANCHE: (
        TokenMetadata("WAVAX", "Wrapped AVAX", 18, "0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7"),
    ),
    _C.CELO: (
        TokenMetadata("CELO", "Celo", 18, "0x471ece3750da237f93b8e339c536989b8978a438"),
    ),
    _C.GANACHE: (
        TokenMetadata("WETH", "Wrapped Ether", 18, "0x0b1ba0af832d7c05fd64161e0db78e85978e8082"),
        TokenMetadata("ZRX", "0x Protocol Token", 18, "0x871dd7c2b4b25e1aa18728e9d5f2af4c4e431f5c"),
    ),
}


class TokenRegistry:
    """Symbol/address lookups for a single chain."""

    def __init__(self, chain: ChainConfig, tokens: tuple[TokenMetadata, ...] | None = None):
        self.chain = chain
        self.tokens = _REGISTRY.get(chain.chain_id, ()) if tokens is None else tokens
        self._by_symbol = {t.symbol.lower(): t for t in self.tokens}
        self._by_address = {t.token_address.lower(): t for t in self.tokens}

    def get_by_symbol_or_address(self, symbol_or_address: str) -> TokenMetadata | None:
        """Look up a token by symbol (case-insensitive) or address."""
        key = symbol_or_address.lower()
        return self._by_symbol.get(key) or self._by_address.get(key)

    def find_address(self, symbol_or_address: str) -> str | None:
        """Resolve a symbol or address to a lowercase token address.

        Addresses are passed through even when they are not in the registry.
        Returns None for unknown symbols.
        """
        if self.is_native(symbol_or_address):
            return ETH_TOKEN_ADDRESS
        if is_valid_address(symbol_or_address):
            return normalize_address(symbol_or_address)
        token = self.get_by_symbol_or_address(symbol_or_address)
        return token.token_address if token else None

    def is_native(self, symbol_or_address: str) -> bool:
        """Whether this names the chain's native asset (e.g. "ETH" or 0xeeee...)."""
        value = symbol_or_address.lower()
        return value == self.chain.native_symbol.lower() or value == ETH_TOKEN_ADDRESS

    def is_native_wrapped(self, symbol_or_address: str) -> bool:
        """Whether this names the chain's wrapped native token (e.g. "WETH")."""
        value = symbol_or_address.lower()
        return (
            value == self.chain.native_wrapped_symbol.lower()
            or value == self.chain.wrapped_native_address.lower()
        )

    def decimals_of(self, address: str) -> int | None:
        token = self._by_address.get(address.lower())
        return token.decimals if token else None
