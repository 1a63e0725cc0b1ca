"""Repair of the pay-taker transformer payload in transformERC20 calldata.

Some routes are encoded with a pay-taker transformation whose token list
holds only a placeholder: one trade token, optionally followed by the
native-asset sentinel, and no amounts. The transformer must sweep both
trade tokens and the native asset back to the taker, so the list is
rebuilt as ``[token, other_trade_token, native_sentinel]``.

The calldata is decoded against the transformERC20 ABI, the payload is
modified as a typed record and the call is re-encoded. Calldata that is not
a transformERC20 call, or carries no placeholder, is returned unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog
from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_abi.exceptions import DecodingError

from swap_api.constants import ETH_TOKEN_ADDRESS
from swap_api.models.types import normalize_address

logger = structlog.get_logger()

# transformERC20(address,address,uint256,uint256,(uint32,bytes)[])
TRANSFORM_ERC20_SELECTOR = bytes.fromhex("415565b0")
TRANSFORM_ERC20_ARGS = ["address", "address", "uint256", "uint256", "(uint32,bytes)[]"]

# PayTakerTransformer.TransformData: (address[] tokens, uint256[] amounts)
PAY_TAKER_DATA_ARGS = ["(address[],uint256[])"]


def _address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])


@dataclass(frozen=True)
class Transformation:
    deployment_nonce: int
    data: bytes


@dataclass(frozen=True)
class TransformERC20Call:
    """Decoded arguments of a transformERC20 call."""

    input_token: str
    output_token: str
    input_token_amount: int
    min_output_token_amount: int
    transformations: tuple[Transformation, ...]

    @classmethod
    def decode(cls, calldata: bytes) -> TransformERC20Call | None:
        """Decode calldata, or return None if it is not a transformERC20 call."""
        if calldata[:4] != TRANSFORM_ERC20_SELECTOR:
            return None
        try:
            input_token, output_token, amount, min_output, transformations = decode(
                TRANSFORM_ERC20_ARGS, calldata[4:]
            )
        except (DecodingError, ValueError):
            return None
        return cls(
            input_token=normalize_address(input_token),
            output_token=normalize_address(output_token),
            input_token_amount=amount,
            min_output_token_amount=min_output,
            transformations=tuple(Transformation(nonce, data) for nonce, data in transformations),
        )

    def encode(self) -> bytes:
        return TRANSFORM_ERC20_SELECTOR + encode(
            TRANSFORM_ERC20_ARGS,
            [
                _address_bytes(self.input_token),
                _address_bytes(self.output_token),
                self.input_token_amount,
                self.min_output_token_amount,
                [(t.deployment_nonce, t.data) for t in self.transformations],
            ],
        )


@dataclass(frozen=True)
class PayTakerTransformData:
    tokens: tuple[str, ...]
    amounts: tuple[int, ...]

    @classmethod
    def decode(cls, data: bytes) -> PayTakerTransformData | None:
        try:
            ((tokens, amounts),) = decode(PAY_TAKER_DATA_ARGS, data)
        except (DecodingError, ValueError):
            return None
        return cls(tokens=tuple(normalize_address(t) for t in tokens), amounts=tuple(amounts))

    def encode(self) -> bytes:
        return encode(
            PAY_TAKER_DATA_ARGS,
            [([_address_bytes(t) for t in self.tokens], list(self.amounts))],
        )


def _placeholder_token(
    payload: PayTakerTransformData, trade_tokens: tuple[str, str], native_token: str
) -> str | None:
    """Return the trade token a placeholder payload names, or None."""
    if payload.amounts:
        return None
    if len(payload.tokens) == 2 and payload.tokens[1] != native_token:
        return None
    if len(payload.tokens) not in (1, 2):
        return None
    token = payload.tokens[0]
    return token if token in trade_tokens else None


def fix_call_data(
    data: str,
    sell_token: str,
    buy_token: str,
    *,
    pay_taker_nonce: int,
    native_token: str = ETH_TOKEN_ADDRESS,
) -> str:
    """Inject both trade tokens into a placeholder pay-taker payload.

    Args:
        data: Hex calldata of the swap
        sell_token: Address of the sell (taker) token
        buy_token: Address of the buy (maker) token
        pay_taker_nonce: Deployment nonce identifying the pay-taker transformer
        native_token: Native-asset sentinel appended to the token list

    Bytes following the ABI-encoded arguments are kept as they are.

    Returns:
        The repaired calldata, or ``data`` unchanged when no placeholder is
        present or the arguments are not canonically encoded
    """
    raw = bytes.fromhex(data.removeprefix("0x"))
    call = TransformERC20Call.decode(raw)
    if call is None:
        return data
    body = call.encode()
    if not raw.startswith(body):
        return data
    tail = raw[len(body) :]

    trade_tokens = (normalize_address(buy_token), normalize_address(sell_token))
    native = normalize_address(native_token)
    changed = False
    transformations = []
    for transformation in call.transformations:
        payload = None
        if transformation.deployment_nonce == pay_taker_nonce:
            payload = PayTakerTransformData.decode(transformation.data)
        token = _placeholder_token(payload, trade_tokens, native) if payload else None
        if token is None:
            transformations.append(transformation)
            continue

        other = trade_tokens[1] if token == trade_tokens[0] else trade_tokens[0]
        fixed = PayTakerTransformData(tokens=(token, other, native), amounts=())
        transformations.append(replace(transformation, data=fixed.encode()))
        changed = True

    if not changed:
        return data

    logger.debug("pay_taker_payload_repaired", sell_token=sell_token, buy_token=buy_token)
    return "0x" + (replace(call, transformations=tuple(transformations)).encode() + tail).hex()


__all__ = [
    "PayTakerTransformData",
    "TRANSFORM_ERC20_SELECTOR",
    "TransformERC20Call",
    "Transformation",
    "fix_call_data",
]
