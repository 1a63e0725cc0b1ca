"""Protocol constants for the swap API.

Centralizes well-known addresses, gas figures and quote defaults.
"""

from decimal import Decimal

from swap_api.models.types import is_valid_address


def _validate_address(name: str, address: str) -> str:
    """Validate and return an address constant.

    Args:
        name: Name of the constant (for error messages)
        address: The address to validate

    Returns:
        The validated address

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# All addresses are lowercase and validated at import time
NULL_ADDRESS = _validate_address("NULL", "0x0000000000000000000000000000000000000000")

# Sentinel used on-chain for the native asset (ETH, BNB, MATIC, ...)
ETH_TOKEN_ADDRESS = _validate_address("ETH", "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee")

# Exchange proxy deployed on most chains
DEFAULT_EXCHANGE_PROXY = _validate_address(
    "exchange proxy", "0xdef1c0ded9bec7f1a1670819833240f027b25eff"
)

NULL_BYTES = "0x"
ONE_WORD_LENGTH = 32

# HTTP surface
SWAP_PATH = "/swap/v1"
HEALTH_CHECK_PATH = "/healthz"
SWAP_DOCS_URL = "https://0x.org/docs/api#swap"
DEFAULT_HTTP_PORT = 3000
DEFAULT_RPC_TIMEOUT_MS = 5000

# Gas figures
TX_BASE_GAS = 21_000
DEFAULT_VALIDATION_GAS_LIMIT = 10_000_000
GAS_LIMIT_BUFFER_MULTIPLIER = Decimal("1.2")
AFFILIATE_FEE_TRANSFORMER_GAS = 15_000
POSITIVE_SLIPPAGE_FEE_TRANSFORMER_GAS = 30_000
WRAP_UNWRAP_GAS = 25_000
FANTOM_WRAP_UNWRAP_GAS = 37_000

# Quote defaults
DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE = Decimal("0.01")
DEFAULT_FALLBACK_SLIPPAGE_PERCENTAGE = Decimal("0.015")
PERCENTAGE_SIG_DIGITS = 4
WETH_DECIMALS = 18

# Market depth
MARKET_DEPTH_MAX_SAMPLES = 50
MARKET_DEPTH_DEFAULT_DISTRIBUTION = Decimal("1.05")
MARKET_DEPTH_END_PRICE_SLIPPAGE_PERC = 20

# Deployment nonce of the transformer that pays the taker at the end of a transformERC20
PAY_TAKER_TRANSFORMER_NONCE = 7
