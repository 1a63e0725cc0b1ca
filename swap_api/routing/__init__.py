"""Interfaces of the external routing engine."""

from swap_api.routing.interfaces import (
    CalldataOptions,
    MarketDepthOptions,
    RoutingEngine,
    SwapQuoteOptions,
    load_routing_engine,
)

__all__ = [
    "CalldataOptions",
    "MarketDepthOptions",
    "RoutingEngine",
    "SwapQuoteOptions",
    "load_routing_engine",
]
