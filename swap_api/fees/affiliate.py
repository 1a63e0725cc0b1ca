"""Affiliate fee amounts for a quote.

The buy-token percentage is applied to the amount the taker receives *after*
the fee, so the fee taken from the worst-case output is
``floor(min_buy_amount * p / (p + 1))``. Sell-token fees are never taken.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Protocol

from swap_api.fees.config import DEFAULT_AFFILIATE_FEE_CONFIG, AffiliateFeeConfig
from swap_api.models.quote import SwapQuote
from swap_api.models.swap import AffiliateFee, AffiliateFeeAmounts, AffiliateFeeType
from swap_api.utils.decimal_utils import DECIMAL_HIGH_PREC_CONTEXT, floor_to_int


class AffiliateFeeCalculator(Protocol):
    """Protocol for sizing affiliate fees."""

    def calculate(self, quote: SwapQuote, fee: AffiliateFee) -> AffiliateFeeAmounts:
        """Compute fee amounts and gas for a quote.

        Args:
            quote: Quote from the routing engine
            fee: Affiliate fee requested by the caller

        Returns:
            Amounts taken from each token and the extra gas they cost
        """
        ...


class DefaultAffiliateFeeCalculator:
    """Default affiliate fee sizing."""

    def __init__(self, config: AffiliateFeeConfig | None = None):
        self.config = config or DEFAULT_AFFILIATE_FEE_CONFIG

    def calculate(self, quote: SwapQuote, fee: AffiliateFee) -> AffiliateFeeAmounts:
        if fee.fee_type is AffiliateFeeType.NONE or self._is_null_recipient(fee.recipient):
            return AffiliateFeeAmounts()

        pct = fee.buy_token_percentage_fee
        if pct < 0:
            raise ValueError(f"buy_token_percentage_fee must be non-negative, got {pct}")

        min_buy_amount = quote.worst_case_quote_info.output_amount
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            buy_token_fee_amount = floor_to_int(Decimal(min_buy_amount) * pct / (pct + 1))

        if fee.fee_type is AffiliateFeeType.POSITIVE_SLIPPAGE_FEE:
            gas_cost = self.config.positive_slippage_fee_gas
        else:
            gas_cost = self.config.percentage_fee_gas

        return AffiliateFeeAmounts(
            sell_token_fee_amount=0,
            buy_token_fee_amount=buy_token_fee_amount,
            gas_cost=gas_cost,
        )

    def _is_null_recipient(self, recipient: str | None) -> bool:
        return not recipient or recipient.lower() == self.config.null_address


# Default calculator instance
DEFAULT_AFFILIATE_FEE_CALCULATOR = DefaultAffiliateFeeCalculator()


def get_affiliate_fee_amounts(quote: SwapQuote, fee: AffiliateFee) -> AffiliateFeeAmounts:
    """Size an affiliate fee with the default configuration."""
    return DEFAULT_AFFILIATE_FEE_CALCULATOR.calculate(quote, fee)
