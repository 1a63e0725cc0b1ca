"""Affiliate attribution trailer for transaction calldata.

A ``ZeroExAPIAffiliate(address affiliate, uint256 timestamp)`` call is
ABI-encoded and appended to the calldata. Contracts ignore trailing bytes,
so the trailer only serves off-chain indexing. The uint256 packs a random
hex nonce followed by the hex unix timestamp in seconds.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass

from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_abi.exceptions import DecodingError

from swap_api.constants import NULL_ADDRESS
from swap_api.models.types import normalize_address

# ZeroExAPIAffiliate(address,uint256)
AFFILIATE_DATA_SELECTOR = bytes.fromhex("869584cd")

# Selector plus two ABI words
AFFILIATE_TRAILER_LENGTH = 4 + 32 + 32

RANDOM_NONCE_LENGTH = 10


@dataclass(frozen=True)
class AttributedCallData:
    """Calldata with the attribution trailer appended.

    Attributes:
        data: Hex calldata including the trailer
        decoded_unique_id: ``"<nonce>-<timestamp>"`` for log correlation
    """

    data: str
    decoded_unique_id: str


def random_hex_number_of_length(length: int, rng: random.Random | None = None) -> str:
    """Return ``length`` random hex digits, none of them zero."""
    rng = rng or random
    return "".join(format(rng.randint(1, 15), "x") for _ in range(length))


def attribute_call_data(
    data: str,
    affiliate_address: str | None,
    *,
    default_affiliate: str = NULL_ADDRESS,
    timestamp: int | None = None,
    rng: random.Random | None = None,
) -> AttributedCallData:
    """Append the affiliate trailer to calldata.

    Args:
        data: Hex calldata (``0x``-prefixed)
        affiliate_address: Affiliate from the request, if any
        default_affiliate: Used when the request names no affiliate
        timestamp: Unix seconds to embed (default: now)
        rng: Random source for the nonce

    Returns:
        The attributed calldata and its unique id
    """
    affiliate = normalize_address(affiliate_address or default_affiliate)
    seconds = int(time.time()) if timestamp is None else timestamp
    nonce = random_hex_number_of_length(RANDOM_NONCE_LENGTH, rng)
    unique_id = int(nonce + format(seconds, "x"), 16)

    trailer = AFFILIATE_DATA_SELECTOR + encode(
        ["address", "uint256"], [bytes.fromhex(affiliate[2:]), unique_id]
    )
    return AttributedCallData(
        data=data + trailer.hex(),
        decoded_unique_id=f"{nonce}-{seconds}",
    )


def decode_attribution(data: str) -> tuple[str, int] | None:
    """Read the affiliate and unique id back from attributed calldata.

    Returns:
        ``(affiliate, unique_id)`` or None if the calldata carries no trailer
    """
    raw = bytes.fromhex(data.removeprefix("0x"))
    if len(raw) < AFFILIATE_TRAILER_LENGTH:
        return None
    trailer = raw[-AFFILIATE_TRAILER_LENGTH:]
    if trailer[:4] != AFFILIATE_DATA_SELECTOR:
        return None
    try:
        affiliate, unique_id = decode(["address", "uint256"], trailer[4:])
    except DecodingError:
        return None
    return normalize_address(affiliate), unique_id


__all__ = [
    "AFFILIATE_DATA_SELECTOR",
    "AFFILIATE_TRAILER_LENGTH",
    "AttributedCallData",
    "attribute_call_data",
    "decode_attribution",
    "random_hex_number_of_length",
]
