"""API error taxonomy.

Core components raise library-level errors (``RevertError``, ``NodeError``,
``ValueError``). The errors here are what the HTTP layer renders: each knows
its HTTP status, its numeric general code and its JSON body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from swap_api.calldata.revert import RevertError


class GeneralErrorCode(IntEnum):
    VALIDATION_ERROR = 100
    TRANSACTION_INVALID = 105
    INSUFFICIENT_FUNDS_ERROR = 109
    GAS_ESTIMATION_FAILED = 111


class ValidationErrorCode(IntEnum):
    REQUIRED_FIELD = 1000
    INCORRECT_FORMAT = 1001
    INVALID_ADDRESS = 1002
    VALUE_OUT_OF_RANGE = 1004
    UNSUPPORTED_OPTION = 1006
    TOKEN_NOT_SUPPORTED = 1009
    FIELD_INVALID = 1010


@dataclass(frozen=True)
class ValidationErrorItem:
    field: str
    code: ValidationErrorCode
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "code": int(self.code), "reason": self.reason}


class SwapAPIError(Exception):
    """Base class for errors rendered to API callers."""

    http_status: int = 400
    general_code: GeneralErrorCode | None = None
    reason: str = "Bad Request"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.reason)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"reason": self.reason}
        if self.general_code is not None:
            body = {"code": int(self.general_code), **body}
        return body


class ValidationError(SwapAPIError):
    """One or more request fields are malformed or out of range."""

    general_code = GeneralErrorCode.VALIDATION_ERROR
    reason = "Validation Failed"

    def __init__(self, items: list[ValidationErrorItem]):
        self.items = items
        super().__init__("; ".join(f"{i.field}: {i.reason}" for i in items) or self.reason)

    @classmethod
    def single(cls, field: str, code: ValidationErrorCode, reason: str) -> ValidationError:
        return cls([ValidationErrorItem(field=field, code=code, reason=reason)])

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["validationErrors"] = [item.to_dict() for item in self.items]
        return body


class RevertAPIError(SwapAPIError):
    """The transaction reverted during simulation with a decodable reason."""

    general_code = GeneralErrorCode.TRANSACTION_INVALID
    reason = "Transaction Invalid"

    def __init__(self, revert: RevertError):
        self.revert = revert
        super().__init__(str(revert))

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["values"] = {
            "name": self.revert.name,
            "message": self.revert.message,
            "args": {k: _jsonable(v) for k, v in self.revert.values.items()},
        }
        return body


class InsufficientFundsError(SwapAPIError):
    """The taker cannot cover the transaction value plus gas."""

    general_code = GeneralErrorCode.INSUFFICIENT_FUNDS_ERROR
    reason = "Insufficient funds for transaction"


class GasEstimationError(SwapAPIError):
    """Gas could not be estimated and no revert reason was recoverable."""

    general_code = GeneralErrorCode.GAS_ESTIMATION_FAILED
    reason = "Gas estimation failed"


class InternalServerError(SwapAPIError):
    """Catch-all for unexpected failures. The message is logged, never returned."""

    http_status = 500
    reason = "Internal Server Error"


def _jsonable(value: Any) -> Any:
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


__all__ = [
    "GasEstimationError",
    "GeneralErrorCode",
    "InsufficientFundsError",
    "InternalServerError",
    "RevertAPIError",
    "SwapAPIError",
    "ValidationError",
    "ValidationErrorCode",
    "ValidationErrorItem",
]
