"""Decoding of revert payloads returned by simulated calls.

Recognizes ``Error(string)``, ``Panic(uint256)`` and the exchange proxy's
custom errors. Anything else, including truncated payloads, is undecodable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import decode  # type: ignore[attr-defined]
from eth_abi.exceptions import DecodingError
from web3 import Web3


@dataclass(frozen=True)
class RevertType:
    name: str
    arg_types: tuple[str, ...]
    arg_names: tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.arg_types)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])


class RevertError(Exception):
    """A decoded on-chain revert.

    Attributes:
        name: Error name, e.g. ``Error`` or ``IncompleteTransformERC20Error``
        signature: Full ABI signature
        values: Decoded arguments by name
        raw: The undecoded revert payload
    """

    def __init__(self, revert_type: RevertType, values: dict[str, Any], raw: bytes):
        self.name = revert_type.name
        self.signature = revert_type.signature
        self.values = values
        self.raw = raw
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.name == "Error":
            return str(self.values["message"])
        args = ", ".join(f"{k}={v}" for k, v in self.values.items())
        return f"{self.name}({args})"


_REVERT_TYPES = (
    RevertType("Error", ("string",), ("message",)),
    RevertType("Panic", ("uint256",), ("code",)),
    RevertType(
        "IncompleteTransformERC20Error",
        ("address", "uint256", "uint256"),
        ("outputToken", "outputTokenAmount", "minOutputTokenAmount"),
    ),
    RevertType(
        "NegativeTransformERC20OutputError",
        ("address", "uint256"),
        ("outputToken", "outputTokenLostAmount"),
    ),
    RevertType(
        "TransformerFailedError",
        ("address", "bytes", "bytes"),
        ("transformer", "transformerData", "resultData"),
    ),
    RevertType(
        "InsufficientEthAttachedError",
        ("uint256", "uint256"),
        ("ethAttached", "ethNeeded"),
    ),
)

REVERT_TYPES_BY_SELECTOR: dict[bytes, RevertType] = {t.selector: t for t in _REVERT_TYPES}


def register_revert_type(revert_type: RevertType) -> None:
    """Make an additional custom error decodable."""
    REVERT_TYPES_BY_SELECTOR[revert_type.selector] = revert_type


def decode_revert_error(data: str | bytes | None) -> RevertError | None:
    """Decode a revert payload.

    Args:
        data: Raw payload as bytes or ``0x``-prefixed hex

    Returns:
        The decoded revert, or None if the payload is empty or unrecognized
    """
    if not data:
        return None
    if isinstance(data, str):
        try:
            raw = bytes.fromhex(data.removeprefix("0x"))
        except ValueError:
            return None
    else:
        raw = data

    if len(raw) < 4:
        return None
    revert_type = REVERT_TYPES_BY_SELECTOR.get(raw[:4])
    if revert_type is None:
        return None
    try:
        values = decode(list(revert_type.arg_types), raw[4:])
    except (DecodingError, ValueError, OverflowError):
        return None
    return RevertError(revert_type, dict(zip(revert_type.arg_names, values, strict=True)), raw)


__all__ = [
    "REVERT_TYPES_BY_SELECTOR",
    "RevertError",
    "RevertType",
    "decode_revert_error",
    "register_revert_type",
]
