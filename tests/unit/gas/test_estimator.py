"""Tests for gas estimation by simulated execution."""

import asyncio

import pytest
from eth_abi import encode  # type: ignore[attr-defined]

from swap_api.calldata.revert import RevertError
from swap_api.errors import GasEstimationError, InsufficientFundsError
from swap_api.gas.estimator import (
    FAKE_TAKER_EXECUTE_SELECTOR,
    GasEstimator,
    apply_gas_buffer,
    calculate_call_data_gas,
    encode_fake_taker_execute,
)
from swap_api.rpc.client import NodeCallError, NodeTransportError, TxData
from tests.conftest import FakeNode
from tests.helpers import EXCHANGE_PROXY, FAKE_TAKER_BYTECODE, TAKER

ERROR_SELECTOR = bytes.fromhex("08c379a0")
TX_DATA = "0xabcdef00"


def fake_taker_result(success: bool, result_data: bytes, gas_used: int) -> str:
    return "0x" + encode(["bool", "bytes", "uint256"], [success, result_data, gas_used]).hex()


def error_payload(message: str) -> bytes:
    return ERROR_SELECTOR + encode(["string"], [message])


def make_tx(**kwargs) -> TxData:
    defaults = {"to": EXCHANGE_PROXY, "data": TX_DATA, "from_": TAKER, "value": 0}
    defaults.update(kwargs)
    return TxData(**defaults)


def override_estimator(node: FakeNode) -> GasEstimator:
    return GasEstimator(node, fake_taker_bytecode=FAKE_TAKER_BYTECODE)


def plain_estimator(node: FakeNode) -> GasEstimator:
    return GasEstimator(node, fake_taker_bytecode=FAKE_TAKER_BYTECODE, supports_state_overrides=False)


class TestHelpers:
    def test_call_data_gas(self):
        # one zero byte, two non-zero bytes
        assert calculate_call_data_gas("0x0001ff") == 4 + 16 * 2
        assert calculate_call_data_gas("0x") == 0

    def test_apply_gas_buffer_rounds_half_up(self):
        assert apply_gas_buffer(100_000) == 120_000
        assert apply_gas_buffer(3) == 4
        assert apply_gas_buffer(5) == 6

    def test_encode_fake_taker_execute(self):
        data = encode_fake_taker_execute(EXCHANGE_PROXY, TX_DATA)

        assert data.startswith("0x" + FAKE_TAKER_EXECUTE_SELECTOR.hex())
        assert EXCHANGE_PROXY[2:] in data
        assert "abcdef00" in data


class TestOverrideSimulation:
    """Simulation through the fake taker with a state override."""

    def test_returns_simulated_gas_plus_calldata_gas(self):
        node = FakeNode(call_result=fake_taker_result(True, b"", 80_000))

        gas = asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

        assert gas == 80_000 + calculate_call_data_gas(TX_DATA)

    def test_call_runs_from_taker_with_override(self):
        node = FakeNode(call_result=fake_taker_result(True, b"", 80_000))

        asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx(value=10**18)))

        ((tx, overrides),) = node.calls
        assert tx.to == TAKER
        assert tx.from_ == TAKER
        assert tx.data.startswith("0x" + FAKE_TAKER_EXECUTE_SELECTOR.hex())
        # raw estimate 100000 buffered by 1.5
        assert tx.gas == 150_000
        assert tx.gas_price == node.gas_price
        override = overrides[TAKER]
        assert override.code == FAKE_TAKER_BYTECODE
        assert override.balance == (10**18 + node.gas_price * 150_000) * 11 // 10

    def test_failed_raw_estimate_uses_default_gas_limit(self):
        node = FakeNode(
            call_result=fake_taker_result(True, b"", 80_000),
            estimate_error=NodeCallError(-32000, "execution reverted"),
        )

        asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

        assert node.calls[0][0].gas == 350_000

    def test_decodable_revert_raises_revert_error(self):
        node = FakeNode(
            call_result=fake_taker_result(False, error_payload("INSUFFICIENT_OUTPUT"), 90_000)
        )

        with pytest.raises(RevertError) as exc_info:
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))
        assert exc_info.value.message == "INSUFFICIENT_OUTPUT"

    def test_undecodable_failure_raises_gas_estimation_error(self):
        node = FakeNode(call_result=fake_taker_result(False, b"\x01\x02", 90_000))

        with pytest.raises(GasEstimationError):
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

    def test_malformed_result_raises_gas_estimation_error(self):
        node = FakeNode(call_result="0x1234")

        with pytest.raises(GasEstimationError):
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

    def test_insufficient_funds(self):
        node = FakeNode(
            call_error=NodeCallError(-32000, "insufficient funds for gas * price + value")
        )

        with pytest.raises(InsufficientFundsError):
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

    def test_call_error_with_revert_data(self):
        node = FakeNode(
            call_error=NodeCallError(
                3, "execution reverted", "0x" + error_payload("Expired").hex()
            )
        )

        with pytest.raises(RevertError) as exc_info:
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))
        assert exc_info.value.message == "Expired"

    def test_call_error_without_revert_data(self):
        node = FakeNode(call_error=NodeCallError(-32000, "out of gas"))

        with pytest.raises(GasEstimationError):
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

    def test_transport_error_propagates(self):
        node = FakeNode(call_error=NodeTransportError("eth_call timed out"))

        with pytest.raises(NodeTransportError):
            asyncio.run(override_estimator(node).estimate_gas_or_throw(make_tx()))

    def test_requires_taker(self):
        with pytest.raises(ValueError):
            asyncio.run(override_estimator(FakeNode()).estimate_gas_or_throw(make_tx(from_=None)))

    def test_without_bytecode_override_is_not_used(self):
        node = FakeNode(call_result="0x")
        estimator = GasEstimator(node)

        asyncio.run(estimator.estimate_gas_or_throw(make_tx()))

        assert estimator.use_overrides is False
        assert node.calls[0][1] is None


class TestPlainSimulation:
    """Nodes without state-override support."""

    def test_uses_raw_estimate(self):
        node = FakeNode(call_result="0x")

        gas = asyncio.run(plain_estimator(node).estimate_gas_or_throw(make_tx()))

        assert gas == 100_000 + calculate_call_data_gas(TX_DATA)
        ((tx, overrides),) = node.calls
        assert overrides is None
        assert tx.to == EXCHANGE_PROXY
        assert tx.gas == 100_000

    def test_failed_estimate_marks_simulation_failed(self):
        node = FakeNode(call_result="0x", estimate_error=NodeCallError(-32000, "reverted"))

        with pytest.raises(GasEstimationError):
            asyncio.run(plain_estimator(node).estimate_gas_or_throw(make_tx()))
        assert node.calls[0][0].gas == 10_000_000

    def test_revert_payload_in_result(self):
        node = FakeNode(call_result="0x" + error_payload("TRANSFER_FAILED").hex())

        with pytest.raises(RevertError):
            asyncio.run(plain_estimator(node).estimate_gas_or_throw(make_tx()))

    def test_undecodable_call_failure_keeps_estimate(self):
        node = FakeNode(call_error=NodeCallError(-32000, "header not found"))

        gas = asyncio.run(plain_estimator(node).estimate_gas_or_throw(make_tx()))

        assert gas == 100_000 + calculate_call_data_gas(TX_DATA)
