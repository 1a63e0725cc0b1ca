"""Swap quote API: prices, calldata and gas for token swaps."""

__version__ = "0.1.0"
__all__ = ["__version__"]
