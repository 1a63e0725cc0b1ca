"""Best-case and guaranteed prices for a quote.

Prices are expressed in whole-token units. The rounding direction depends on
which side of the trade is fixed so that the quoted price is never better
for the trader than what the route actually delivers:

- Selling (exact input): price = output / input, rounded down to the buy
  token's decimals.
- Buying (exact output): price = input / output, rounded up to the sell
  token's decimals.

The input side includes order fees. The affiliate fee is taken out of the
output amount before dividing.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from swap_api.models.quote import QuoteInfo, SwapQuote
from swap_api.models.swap import MarketOperation
from swap_api.utils.decimal_utils import (
    DECIMAL_HIGH_PREC_CONTEXT,
    round_to_decimals,
    to_unit_amount,
)


@dataclass(frozen=True)
class SwapQuotePrice:
    price: Decimal
    guaranteed_price: Decimal


def calculate_price(
    quote_info: QuoteInfo,
    *,
    side: MarketOperation,
    sell_token_decimals: int,
    buy_token_decimals: int,
    fee_unit_amount: Decimal = Decimal(0),
) -> Decimal:
    """Price one case of a quote.

    Args:
        quote_info: Best-case or worst-case amounts
        side: Which side of the trade is fixed
        sell_token_decimals: Decimals of the input token
        buy_token_decimals: Decimals of the output token
        fee_unit_amount: Affiliate fee in whole output-token units

    Returns:
        The rounded price

    Raises:
        ValueError: If the amount used as divisor is zero
    """
    output_units = to_unit_amount(quote_info.output_amount, buy_token_decimals)
    input_units = to_unit_amount(quote_info.total_input_amount, sell_token_decimals)

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        net_output = output_units - fee_unit_amount
        if side is MarketOperation.SELL:
            if input_units.is_zero():
                raise ValueError("Cannot price a sell quote with a zero input amount")
            return round_to_decimals(net_output / input_units, buy_token_decimals, ROUND_FLOOR)

        if net_output.is_zero():
            raise ValueError("Cannot price a buy quote with a zero output amount")
        return round_to_decimals(input_units / net_output, sell_token_decimals, ROUND_CEILING)


def get_swap_quote_price(
    quote: SwapQuote, buy_token_percentage_fee: Decimal = Decimal(0)
) -> SwapQuotePrice:
    """Compute the indicative and guaranteed price of a quote.

    The fee is sized from the worst-case output and deducted from both cases.

    Args:
        quote: Quote from the routing engine
        buy_token_percentage_fee: Affiliate fee fraction on the buy token

    Returns:
        Price from best-case amounts and guaranteed price from worst-case amounts
    """
    worst = quote.worst_case_quote_info
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        fee_unit_amount = (
            to_unit_amount(worst.output_amount, quote.buy_token_decimals) * buy_token_percentage_fee
        )

    kwargs = {
        "side": quote.type,
        "sell_token_decimals": quote.sell_token_decimals,
        "buy_token_decimals": quote.buy_token_decimals,
        "fee_unit_amount": fee_unit_amount,
    }
    return SwapQuotePrice(
        price=calculate_price(quote.best_case_quote_info, **kwargs),
        guaranteed_price=calculate_price(worst, **kwargs),
    )


__all__ = ["SwapQuotePrice", "calculate_price", "get_swap_quote_price"]
