"""Test helpers module for shared test utilities.

- constants: Token addresses, accounts and common amounts
- factories: Quote, request and calldata factory functions
"""

from tests.helpers.constants import (
    AFFILIATE,
    DAI,
    EXCHANGE_PROXY,
    FAKE_TAKER_BYTECODE,
    FEE_RECIPIENT,
    ONE_ETHER,
    TAKER,
    USDC,
    USDT,
    WBTC,
    WETH,
    ZRX,
)
from tests.helpers.factories import (
    make_depth_curve,
    make_params,
    make_pay_taker_data,
    make_placeholder_calldata,
    make_quote,
    make_transform_erc20_calldata,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "ZRX",
    "TAKER",
    "AFFILIATE",
    "FEE_RECIPIENT",
    "EXCHANGE_PROXY",
    "FAKE_TAKER_BYTECODE",
    "ONE_ETHER",
    # Factories
    "make_quote",
    "make_depth_curve",
    "make_params",
    "make_pay_taker_data",
    "make_transform_erc20_calldata",
    "make_placeholder_calldata",
]
