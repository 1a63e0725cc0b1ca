"""Tests for the JSON-RPC node client."""

import asyncio
import json

import httpx
import pytest

from swap_api.rpc.client import (
    JsonRpcClient,
    NodeCallError,
    NodeTransportError,
    StateOverride,
    TxData,
)
from tests.helpers import EXCHANGE_PROXY, TAKER

RPC_URL = "http://node.test"


def run_with_handler(handler, action):
    """Run ``action(client)`` against a client whose HTTP layer is ``handler``."""

    async def main():
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = JsonRpcClient([RPC_URL], timeout_ms=1000, client=http)
        try:
            return await action(client)
        finally:
            await client.aclose()

    return asyncio.run(main())


def result_handler(result, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if seen is not None:
            seen.append(body)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return handler


class TestTxData:
    def test_to_rpc_hex_encodes_numbers(self):
        tx = TxData(to=EXCHANGE_PROXY, data="0x", from_=TAKER, value=10, gas_price=1, gas=21000)

        assert tx.to_rpc() == {
            "to": EXCHANGE_PROXY,
            "data": "0x",
            "value": "0xa",
            "from": TAKER,
            "gasPrice": "0x1",
            "gas": "0x5208",
        }

    def test_optional_fields_omitted(self):
        assert set(TxData(to=EXCHANGE_PROXY, data="0x").to_rpc()) == {"to", "data", "value"}


class TestRequests:
    def test_estimate_gas(self):
        seen: list = []
        tx = TxData(to=EXCHANGE_PROXY, data="0x")

        gas = run_with_handler(result_handler("0x5208", seen), lambda c: c.estimate_gas(tx))

        assert gas == 21000
        assert seen[0]["method"] == "eth_estimateGas"
        assert seen[0]["params"] == [tx.to_rpc()]

    def test_gas_price(self):
        price = run_with_handler(result_handler(hex(50 * 10**9)), lambda c: c.get_gas_price())
        assert price == 50 * 10**9

    def test_call_with_state_override(self):
        seen: list = []
        tx = TxData(to=TAKER, data="0x1234", from_=TAKER)
        overrides = {TAKER: StateOverride(code="0x60", balance=255)}

        result = run_with_handler(result_handler("0xbeef", seen), lambda c: c.call(tx, overrides))

        assert result == "0xbeef"
        assert seen[0]["method"] == "eth_call"
        assert seen[0]["params"] == [
            tx.to_rpc(),
            "latest",
            {TAKER: {"code": "0x60", "balance": "0xff"}},
        ]

    def test_call_without_override(self):
        seen: list = []
        tx = TxData(to=EXCHANGE_PROXY, data="0x")

        run_with_handler(result_handler("0x", seen), lambda c: c.call(tx))

        assert seen[0]["params"] == [tx.to_rpc(), "latest"]

    def test_request_ids_increase(self):
        seen: list = []

        async def twice(client):
            await client.get_gas_price()
            await client.get_gas_price()

        run_with_handler(result_handler("0x1", seen), twice)

        assert seen[1]["id"] > seen[0]["id"]


class TestErrors:
    def test_error_object_raises_call_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": 3, "message": "execution reverted", "data": "0x08c379a0"},
                },
            )

        with pytest.raises(NodeCallError) as exc_info:
            run_with_handler(handler, lambda c: c.call(TxData(to=EXCHANGE_PROXY, data="0x")))

        assert exc_info.value.code == 3
        assert exc_info.value.message == "execution reverted"
        assert exc_info.value.data == "0x08c379a0"

    def test_nested_revert_data(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": -32000, "message": "reverted", "data": {"data": "0xabcd"}},
                },
            )

        with pytest.raises(NodeCallError) as exc_info:
            run_with_handler(handler, lambda c: c.get_gas_price())
        assert exc_info.value.data == "0xabcd"

    def test_http_error_status(self):
        with pytest.raises(NodeTransportError):
            run_with_handler(lambda request: httpx.Response(502), lambda c: c.get_gas_price())

    def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NodeTransportError):
            run_with_handler(handler, lambda c: c.get_gas_price())

    def test_non_json_body(self):
        with pytest.raises(NodeTransportError):
            run_with_handler(
                lambda request: httpx.Response(200, content=b"<html>"), lambda c: c.get_gas_price()
            )

    def test_missing_result(self):
        with pytest.raises(NodeTransportError):
            run_with_handler(
                lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1}),
                lambda c: c.get_gas_price(),
            )

    def test_requires_url(self):
        with pytest.raises(ValueError):
            JsonRpcClient([])
