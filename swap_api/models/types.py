"""Annotated field types shared by request, quote and response models.

Amounts travel as base-10 strings on the wire and as ``int``/``Decimal`` in
memory; the serializers below render them back to plain strings.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

UINT256_MAX = 2**256 - 1

ADDRESS_HEX_LENGTH = 40


def validate_uint256(value: Any) -> str:
    """Check that a query value is a base-10 integer in uint256 range.

    Args:
        value: Raw value (``str`` from a query string, or ``int``)

    Returns:
        The value as a decimal string

    Raises:
        ValueError: If the value is not an integer string, is negative or overflows
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"expected an integer string, got {type(value).__name__}")
    if isinstance(value, str) and not value.isdigit():
        raise ValueError(f"'{value}' is not a non-negative base-10 integer")

    number = int(value)
    if number < 0:
        raise ValueError(f"{value} is negative")
    if number > UINT256_MAX:
        raise ValueError(f"{value} does not fit in a uint256")
    return str(number)


def format_decimal(value: Decimal | int) -> str:
    """Plain decimal string: no exponent, no trailing zeros ("0.0005", "21000")."""
    if isinstance(value, int):
        return str(value)
    if value.is_zero():
        return "0"
    return format(value.normalize(), "f")


Address = Annotated[str, Field(pattern=rf"^0x[a-fA-F0-9]{{{ADDRESS_HEX_LENGTH}}}$")]

# Integer query value kept as its decimal string until parsed
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="Base-10 amount in token base units (uint256)"),
]

Bytes = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]*$")]

IntString = Annotated[int, PlainSerializer(str, return_type=str)]

DecimalString = Annotated[Decimal, PlainSerializer(format_decimal, return_type=str)]


def is_valid_address(address: str) -> bool:
    """Whether ``address`` is ``0x`` followed by 40 hex digits."""
    if not isinstance(address, str) or not address.startswith("0x"):
        return False
    digits = address[2:]
    return len(digits) == ADDRESS_HEX_LENGTH and all(c in "0123456789abcdefABCDEF" for c in digits)


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an address and make sure it carries the ``0x`` prefix.

    Args:
        address: Address with or without prefix, any case
        validate: Raise instead of passing malformed input through

    Raises:
        ValueError: If ``validate`` is set and the result is not an address
    """
    lowered = address.lower()
    normalized = lowered if lowered.startswith("0x") else "0x" + lowered
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized
