"""Affiliate fee configuration."""

from dataclasses import dataclass

from swap_api.constants import (
    AFFILIATE_FEE_TRANSFORMER_GAS,
    NULL_ADDRESS,
    POSITIVE_SLIPPAGE_FEE_TRANSFORMER_GAS,
)


@dataclass(frozen=True)
class AffiliateFeeConfig:
    """Constants used when sizing affiliate fees.

    Attributes:
        percentage_fee_gas: Extra gas of the fee transformer for a flat percentage fee
        positive_slippage_fee_gas: Extra gas of the positive-slippage fee transformer
        null_address: Recipient treated as "no recipient"
    """

    percentage_fee_gas: int = AFFILIATE_FEE_TRANSFORMER_GAS
    positive_slippage_fee_gas: int = POSITIVE_SLIPPAGE_FEE_TRANSFORMER_GAS
    null_address: str = NULL_ADDRESS


# Default configuration instance
DEFAULT_AFFILIATE_FEE_CONFIG = AffiliateFeeConfig()
