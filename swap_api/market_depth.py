"""Market depth: bucketing a sampled liquidity curve.

The routing engine samples every source at a geometric series of amounts.
Each sample has a price (output per input, in base units). This module
spreads those samples over a fixed number of price buckets running from the
best price on the curve towards the worst, and reports how much input can
be filled at or better than each bucket's price.

Asks are the Sell side: prices fall from the first bucket onwards.
Bids are the Buy side: prices rise from the first bucket onwards.
"""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from swap_api.constants import (
    MARKET_DEPTH_DEFAULT_DISTRIBUTION,
    MARKET_DEPTH_END_PRICE_SLIPPAGE_PERC,
)
from swap_api.models.swap import MarketOperation
from swap_api.sources import ERC20BridgeSource
from swap_api.utils.decimal_utils import DECIMAL_HIGH_PREC_CONTEXT


@dataclass(frozen=True)
class DepthSample:
    """One sample of a source: ``input`` in, ``output`` out (base units)."""

    source: ERC20BridgeSource
    input: int
    output: int

    @property
    def price(self) -> Decimal | None:
        if self.input == 0 or self.output == 0:
            return None
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return Decimal(self.output) / Decimal(self.input)


# Samples of one source, in increasing input order
DepthCurve = Sequence[DepthSample]


@dataclass(frozen=True)
class MarketDepth:
    """Bid/ask liquidity curves returned by the routing engine.

    Attributes:
        asks: Per-source curves for selling the sell token
        bids: Per-source curves for buying the sell token
        maker_token_decimals: Decimals of the buy token
        taker_token_decimals: Decimals of the sell token
    """

    asks: Sequence[DepthCurve]
    bids: Sequence[DepthCurve]
    maker_token_decimals: int
    taker_token_decimals: int


@dataclass(frozen=True)
class BucketedPriceDepth:
    bucket: int
    price: Decimal
    bucket_total: Decimal
    cumulative: Decimal


def _is_better(a: Decimal, b: Decimal, side: MarketOperation) -> bool:
    return a > b if side is MarketOperation.SELL else a < b


def _best(prices: list[Decimal], side: MarketOperation) -> Decimal:
    return max(prices) if side is MarketOperation.SELL else min(prices)


def calculate_start_end_bucket_price(
    curves: Sequence[DepthCurve], side: MarketOperation
) -> tuple[Decimal, Decimal]:
    """Best price at the smallest sampled amount and at the largest.

    Returns:
        ``(start, end)``, both zero when no source produced a priced sample
    """
    start_prices = [p for c in curves if c and (p := c[0].price) is not None]
    end_prices = [p for c in curves if c and (p := c[-1].price) is not None]
    if not start_prices or not end_prices:
        return Decimal(0), Decimal(0)
    return _best(start_prices, side), _best(end_prices, side)


def get_bucket_prices(
    start_price: Decimal,
    end_price: Decimal,
    num_buckets: int,
    distribution_base: Decimal = MARKET_DEPTH_DEFAULT_DISTRIBUTION,
) -> list[Decimal]:
    """Bucket prices from ``start_price`` to ``end_price``.

    Step sizes grow geometrically by ``distribution_base`` so buckets are
    denser near the start of the curve. The first price is ``start_price``
    and the last is ``end_price``.
    """
    if num_buckets <= 0:
        return []
    if num_buckets == 1:
        return [start_price]

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        weights = [distribution_base**i for i in range(num_buckets - 1)]
        total = sum(weights, Decimal(0))
        prices = [start_price]
        accumulated = Decimal(0)
        for i, weight in enumerate(weights):
            accumulated += weight
            if i == len(weights) - 1:
                prices.append(end_price)
            else:
                prices.append(start_price + (end_price - start_price) * accumulated / total)
    return prices


def distribute_samples_to_buckets(
    curves: Sequence[DepthCurve],
    bucket_prices: list[Decimal],
    side: MarketOperation,
) -> list[BucketedPriceDepth]:
    """Accumulate the deepest fill per source at each bucket price.

    A sample lands in the first bucket whose price it meets or beats. For
    each source the largest input seen so far is carried into every later
    bucket, and the cumulative depth is the sum over sources.
    """
    depth_by_source: dict[ERC20BridgeSource, list[int]] = {}
    for curve in curves:
        for sample in curve:
            price = sample.price
            if price is None:
                continue
            index = next(
                (
                    i
                    for i, bucket_price in enumerate(bucket_prices)
                    if not _is_better(bucket_price, price, side)
                ),
                None,
            )
            if index is None:
                continue
            per_bucket = depth_by_source.setdefault(sample.source, [0] * len(bucket_prices))
            per_bucket[index] = max(per_bucket[index], sample.input)

    running = {source: 0 for source in depth_by_source}
    result = []
    previous = Decimal(0)
    for i, bucket_price in enumerate(bucket_prices):
        for source, per_bucket in depth_by_source.items():
            running[source] = max(running[source], per_bucket[i])
        cumulative = Decimal(sum(running.values()))
        result.append(
            BucketedPriceDepth(
                bucket=i,
                price=bucket_price,
                bucket_total=cumulative - previous,
                cumulative=cumulative,
            )
        )
        previous = cumulative
    return result


def calculate_depth_for_side(
    curves: Sequence[DepthCurve],
    side: MarketOperation,
    num_buckets: int,
    distribution_base: Decimal = MARKET_DEPTH_DEFAULT_DISTRIBUTION,
    max_end_slippage_percentage: int = MARKET_DEPTH_END_PRICE_SLIPPAGE_PERC,
) -> list[BucketedPriceDepth]:
    """Bucket one side of the curve.

    The end price is clamped to at most ``max_end_slippage_percentage`` away
    from the start price; samples beyond it fall in no bucket.

    Returns:
        ``num_buckets`` buckets; all at price zero with no depth if the side
        has no liquidity
    """
    start_price, end_price = calculate_start_end_bucket_price(curves, side)
    if start_price.is_zero():
        zero = Decimal(0)
        return [BucketedPriceDepth(i, zero, zero, zero) for i in range(num_buckets)]

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        slippage = Decimal(max_end_slippage_percentage) / 100
        if side is MarketOperation.SELL:
            end_price = max(start_price * (1 - slippage), end_price)
        else:
            end_price = min(start_price * (1 + slippage), end_price)

    bucket_prices = get_bucket_prices(start_price, end_price, num_buckets, distribution_base)
    return distribute_samples_to_buckets(curves, bucket_prices, side)


def scale_price_by_decimals(
    depth: list[BucketedPriceDepth], taker_token_decimals: int, maker_token_decimals: int
) -> list[BucketedPriceDepth]:
    """Convert base-unit prices into whole-token prices."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        factor = Decimal(10) ** (taker_token_decimals - maker_token_decimals)
        return [replace(b, price=b.price * factor) for b in depth]


__all__ = [
    "BucketedPriceDepth",
    "DepthSample",
    "MarketDepth",
    "calculate_depth_for_side",
    "calculate_start_end_bucket_price",
    "distribute_samples_to_buckets",
    "get_bucket_prices",
    "scale_price_by_decimals",
]
