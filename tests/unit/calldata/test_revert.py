"""Tests for revert payload decoding."""

from eth_abi import encode  # type: ignore[attr-defined]

from swap_api.calldata.revert import (
    REVERT_TYPES_BY_SELECTOR,
    RevertError,
    RevertType,
    decode_revert_error,
    register_revert_type,
)
from tests.helpers import USDC

ERROR_SELECTOR = bytes.fromhex("08c379a0")
PANIC_SELECTOR = bytes.fromhex("4e487b71")


class TestSelectors:
    def test_standard_selectors(self):
        assert REVERT_TYPES_BY_SELECTOR[ERROR_SELECTOR].name == "Error"
        assert REVERT_TYPES_BY_SELECTOR[PANIC_SELECTOR].name == "Panic"


class TestDecodeRevertError:
    def test_error_string(self):
        data = ERROR_SELECTOR + encode(["string"], ["INSUFFICIENT_OUTPUT"])
        revert = decode_revert_error(data)

        assert isinstance(revert, RevertError)
        assert revert.name == "Error"
        assert revert.message == "INSUFFICIENT_OUTPUT"
        assert str(revert) == "INSUFFICIENT_OUTPUT"
        assert revert.raw == data

    def test_hex_string_input(self):
        data = ERROR_SELECTOR + encode(["string"], ["nope"])
        revert = decode_revert_error("0x" + data.hex())
        assert revert is not None and revert.message == "nope"

    def test_panic(self):
        revert = decode_revert_error(PANIC_SELECTOR + encode(["uint256"], [0x11]))

        assert revert.name == "Panic"
        assert revert.values == {"code": 0x11}

    def test_custom_exchange_error(self):
        revert_type = next(
            t for t in REVERT_TYPES_BY_SELECTOR.values() if t.name == "IncompleteTransformERC20Error"
        )
        data = revert_type.selector + encode(
            ["address", "uint256", "uint256"], [bytes.fromhex(USDC[2:]), 5, 10]
        )
        revert = decode_revert_error(data)

        assert revert.name == "IncompleteTransformERC20Error"
        assert revert.values["outputTokenAmount"] == 5
        assert revert.values["minOutputTokenAmount"] == 10

    def test_unknown_selector(self):
        assert decode_revert_error(bytes.fromhex("deadbeef") + b"\x00" * 32) is None

    def test_empty_and_short_payloads(self):
        assert decode_revert_error(b"") is None
        assert decode_revert_error(None) is None
        assert decode_revert_error("0x") is None
        assert decode_revert_error(b"\x08\xc3") is None

    def test_truncated_payload(self):
        data = ERROR_SELECTOR + encode(["string"], ["INSUFFICIENT_OUTPUT"])
        assert decode_revert_error(data[:40]) is None

    def test_invalid_hex(self):
        assert decode_revert_error("0xzz") is None


class TestRegisterRevertType:
    def test_registered_type_becomes_decodable(self):
        revert_type = RevertType("SwapExpiredError", ("uint256",), ("deadline",))
        register_revert_type(revert_type)
        try:
            revert = decode_revert_error(revert_type.selector + encode(["uint256"], [42]))
            assert revert.name == "SwapExpiredError"
            assert revert.message == "SwapExpiredError(deadline=42)"
        finally:
            del REVERT_TYPES_BY_SELECTOR[revert_type.selector]
