"""Exchange-proxy gas overhead lookup by fill-source combination.

The routing engine charges each candidate path the fixed overhead of the
settlement route it would take. Combinations that can use a VIP (direct)
route are cheap; everything else pays the generic transformERC20 overhead.
The tables are computed once over every relevant subset of sources and
exposed as read-only mappings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from itertools import combinations
from types import MappingProxyType

from swap_api.sources import ERC20BridgeSource

# Overhead of the generic transformERC20 route
DEFAULT_OVERHEAD = 150_000

# Base overhead shared by every VIP route
VIP_BASE_OVERHEAD = 21_000

_S = ERC20BridgeSource

_UNISWAP_V2_LIKE = (_S.UNISWAP_V2, _S.SUSHISWAP)
_BSC_UNISWAP_V2_FORKS = (
    _S.PANCAKESWAP,
    _S.PANCAKESWAP_V2,
    _S.BAKERYSWAP,
    _S.SUSHISWAP,
    _S.APESWAP,
    _S.CAFESWAP,
    _S.CHEESESWAP,
    _S.JULSWAP,
    _S.WAULTSWAP,
)
# Native fills enter the batch route as RFQ orders
_BATCH_SOURCES = (
    _S.UNISWAP_V2,
    _S.SUSHISWAP,
    _S.LIQUIDITY_PROVIDER,
    _S.NATIVE,
    _S.UNISWAP_V3,
)
_MULTIHOP_SOURCES = (
    _S.UNISWAP_V2,
    _S.SUSHISWAP,
    _S.LIQUIDITY_PROVIDER,
    _S.UNISWAP_V3,
)


def _subsets(sources: Iterable[ERC20BridgeSource]) -> list[frozenset[ERC20BridgeSource]]:
    items = tuple(sources)
    return [frozenset(c) for r in range(len(items) + 1) for c in combinations(items, r)]


@dataclass(frozen=True)
class GasOverheadTable:
    """Immutable mapping from a set of fill sources to a gas overhead.

    Attributes:
        overheads: Precomputed overhead per source combination
        default: Overhead for any combination not in ``overheads``
    """

    overheads: Mapping[frozenset[ERC20BridgeSource], int] = field(
        default_factory=lambda: MappingProxyType({})
    )
    default: int = DEFAULT_OVERHEAD

    def overhead_for(self, sources: Iterable[ERC20BridgeSource]) -> int:
        """Return the overhead for the given fill sources."""
        return self.overheads.get(frozenset(sources), self.default)

    def __call__(self, sources: Iterable[ERC20BridgeSource]) -> int:
        return self.overhead_for(sources)


def build_vip_overhead_table(is_bsc: bool = False) -> GasOverheadTable:
    """Build the overhead table used when VIP routes are allowed.

    Later rules take precedence over earlier ones, so the cheapest
    single-source routes are written last.

    Args:
        is_bsc: Whether PancakeSwap-style forks get the direct route

    Returns:
        The precomputed table
    """
    table: dict[frozenset[ERC20BridgeSource], int] = {}

    # Multiplex multi-hop
    for subset in _subsets(_MULTIHOP_SOURCES):
        table[subset | {_S.MULTI_HOP}] = VIP_BASE_OVERHEAD + 25_000

    # Multiplex batch fill
    for subset in _subsets(_BATCH_SOURCES):
        table[subset] = VIP_BASE_OVERHEAD + 15_000

    table[frozenset({_S.LIQUIDITY_PROVIDER})] = VIP_BASE_OVERHEAD + 10_000
    table[frozenset({_S.CURVE})] = VIP_BASE_OVERHEAD + 40_000
    table[frozenset({_S.UNISWAP_V3})] = VIP_BASE_OVERHEAD + 5_000

    if is_bsc:
        for source in _BSC_UNISWAP_V2_FORKS:
            table[frozenset({source})] = VIP_BASE_OVERHEAD

    for source in _UNISWAP_V2_LIKE:
        table[frozenset({source})] = VIP_BASE_OVERHEAD

    return GasOverheadTable(overheads=MappingProxyType(table))


def build_no_vip_overhead_table() -> GasOverheadTable:
    """Build the flat table used when VIP routes are disallowed."""
    return GasOverheadTable()


__all__ = [
    "DEFAULT_OVERHEAD",
    "GasOverheadTable",
    "VIP_BASE_OVERHEAD",
    "build_no_vip_overhead_table",
    "build_vip_overhead_table",
]
