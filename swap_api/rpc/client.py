"""JSON-RPC access to an Ethereum node.

``NodeClient`` is the capability the gas estimator needs: a plain gas
estimate, the current gas price and ``eth_call`` with optional state
overrides. ``JsonRpcClient`` implements it over HTTP with httpx. A timeout
is enforced per request and nothing is retried.
"""

from __future__ import annotations

import itertools
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from swap_api.constants import DEFAULT_RPC_TIMEOUT_MS

logger = structlog.get_logger()


class NodeError(Exception):
    """Base class for node failures."""


class NodeCallError(NodeError):
    """The node answered with a JSON-RPC error object.

    Attributes:
        code: JSON-RPC error code
        message: Error message from the node
        data: Revert payload as hex, when the node returned one
    """

    def __init__(self, code: int | None, message: str, data: str | None = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


class NodeTransportError(NodeError):
    """HTTP failure, timeout or malformed response."""


@dataclass(frozen=True)
class TxData:
    """A transaction skeleton for estimation and simulation."""

    to: str
    data: str
    from_: str | None = None
    value: int = 0
    gas_price: int | None = None
    gas: int | None = None

    def to_rpc(self) -> dict[str, str]:
        tx = {"to": self.to, "data": self.data, "value": hex(self.value)}
        if self.from_ is not None:
            tx["from"] = self.from_
        if self.gas_price is not None:
            tx["gasPrice"] = hex(self.gas_price)
        if self.gas is not None:
            tx["gas"] = hex(self.gas)
        return tx


@dataclass(frozen=True)
class StateOverride:
    """Code and/or balance substituted at an address for one eth_call."""

    code: str | None = None
    balance: int | None = None

    def to_rpc(self) -> dict[str, str]:
        override: dict[str, str] = {}
        if self.code is not None:
            override["code"] = self.code
        if self.balance is not None:
            override["balance"] = hex(self.balance)
        return override


class NodeClient(Protocol):
    """Node capabilities used by the gas estimator."""

    async def estimate_gas(self, tx: TxData) -> int:
        """Return the node's raw gas estimate for a transaction."""
        ...

    async def get_gas_price(self) -> int:
        """Return the current gas price in wei."""
        ...

    async def call(
        self, tx: TxData, overrides: Mapping[str, StateOverride] | None = None
    ) -> str:
        """Execute ``eth_call`` and return the hex result."""
        ...


def _extract_revert_data(error_data: Any) -> str | None:
    if isinstance(error_data, str):
        return error_data
    if isinstance(error_data, dict):
        for key in ("data", "result", "return"):
            if isinstance(error_data.get(key), str):
                return error_data[key]
    return None


class JsonRpcClient:
    """httpx-based JSON-RPC client over one or more node URLs.

    A URL is picked at random for every request.
    """

    def __init__(
        self,
        urls: Sequence[str],
        *,
        timeout_ms: int = DEFAULT_RPC_TIMEOUT_MS,
        client: httpx.AsyncClient | None = None,
    ):
        if not urls:
            raise ValueError("At least one RPC URL is required")
        self.urls = tuple(urls)
        self.timeout_s = timeout_ms / 1000
        self._client = client or httpx.AsyncClient(timeout=self.timeout_s)
        self._ids = itertools.count(1)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC request and return its ``result``.

        Raises:
            NodeCallError: If the node returned an error object
            NodeTransportError: On HTTP failure, timeout or malformed body
        """
        url = random.choice(self.urls)
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = await self._client.post(url, json=payload, timeout=self.timeout_s)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            logger.warning("rpc_timeout", method=method, timeout_s=self.timeout_s)
            raise NodeTransportError(f"{method} timed out after {self.timeout_s}s") from e
        except httpx.HTTPError as e:
            logger.warning("rpc_http_error", method=method, error=str(e))
            raise NodeTransportError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise NodeTransportError(f"{method} returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise NodeTransportError(f"{method} returned a malformed response")
        if body.get("error") is not None:
            error = body["error"]
            if not isinstance(error, dict):
                raise NodeCallError(None, str(error))
            raise NodeCallError(
                error.get("code"),
                str(error.get("message", "")),
                _extract_revert_data(error.get("data")),
            )
        if "result" not in body:
            raise NodeTransportError(f"{method} response has no result")
        return body["result"]

    async def estimate_gas(self, tx: TxData) -> int:
        return int(await self.request("eth_estimateGas", [tx.to_rpc()]), 16)

    async def get_gas_price(self) -> int:
        return int(await self.request("eth_gasPrice", []), 16)

    async def call(
        self, tx: TxData, overrides: Mapping[str, StateOverride] | None = None
    ) -> str:
        params: list[Any] = [tx.to_rpc(), "latest"]
        if overrides:
            params.append({address: o.to_rpc() for address, o in overrides.items()})
        result = await self.request("eth_call", params)
        if not isinstance(result, str):
            raise NodeTransportError("eth_call returned a non-hex result")
        return result


__all__ = [
    "JsonRpcClient",
    "NodeCallError",
    "NodeClient",
    "NodeError",
    "NodeTransportError",
    "StateOverride",
    "TxData",
]
