"""Affiliate fee handling.

Usage:
    from swap_api.fees import DefaultAffiliateFeeCalculator

    calculator = DefaultAffiliateFeeCalculator()
    amounts = calculator.calculate(quote, affiliate_fee)
"""

from swap_api.fees.affiliate import (
    DEFAULT_AFFILIATE_FEE_CALCULATOR,
    AffiliateFeeCalculator,
    DefaultAffiliateFeeCalculator,
    get_affiliate_fee_amounts,
)
from swap_api.fees.config import DEFAULT_AFFILIATE_FEE_CONFIG, AffiliateFeeConfig

__all__ = [
    "AffiliateFeeCalculator",
    "DefaultAffiliateFeeCalculator",
    "DEFAULT_AFFILIATE_FEE_CALCULATOR",
    "AffiliateFeeConfig",
    "DEFAULT_AFFILIATE_FEE_CONFIG",
    "get_affiliate_fee_amounts",
]
