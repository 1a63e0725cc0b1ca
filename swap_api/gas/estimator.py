"""Gas estimation by simulated execution.

The prepared transaction is executed with ``eth_call`` against a fake taker:
the node is asked to place a helper contract (with a synthetic balance) at
the taker's address, and the call runs ``FakeTaker.execute(to, data)`` from
there. The helper reports ``(success, resultData, gasUsed)``, so balance and
allowance assumptions in the exchange are met without funding a real
account, and a revert comes back as data instead of an RPC error.

Nodes without state-override support fall back to a plain ``eth_call``.
In that mode a failed raw estimate marks the simulation as failed, while an
undecodable failure of the call itself does not.
"""

from __future__ import annotations

import asyncio
import decimal
from dataclasses import dataclass
from decimal import Decimal

import structlog
from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_abi.exceptions import DecodingError

from swap_api.calldata.revert import decode_revert_error
from swap_api.constants import DEFAULT_VALIDATION_GAS_LIMIT, GAS_LIMIT_BUFFER_MULTIPLIER
from swap_api.errors import GasEstimationError, InsufficientFundsError
from swap_api.models.types import normalize_address
from swap_api.rpc.client import (
    NodeCallError,
    NodeClient,
    NodeError,
    StateOverride,
    TxData,
)
from swap_api.utils.decimal_utils import (
    DECIMAL_HIGH_PREC_CONTEXT,
    floor_to_int,
    round_half_up_to_int,
)

logger = structlog.get_logger()

# execute(address,bytes)
FAKE_TAKER_EXECUTE_SELECTOR = bytes.fromhex("1cff79cd")
FAKE_TAKER_RESULT_TYPES = ["bool", "bytes", "uint256"]

# Calldata gas per byte
ZERO_BYTE_GAS = 4
NON_ZERO_BYTE_GAS = 16


@dataclass(frozen=True)
class GasEstimatorConfig:
    """Multipliers and defaults used during simulation.

    Attributes:
        estimate_gas_multiplier: Applied to the node's raw estimate
        balance_multiplier: Headroom on the fake taker's synthetic balance
        default_gas_limit: Gas limit used when the raw estimate fails
        validation_gas_limit: Gas limit used by the no-override path on failure
    """

    estimate_gas_multiplier: Decimal = Decimal("1.5")
    balance_multiplier: Decimal = Decimal("1.1")
    default_gas_limit: int = 350_000
    validation_gas_limit: int = DEFAULT_VALIDATION_GAS_LIMIT


DEFAULT_GAS_ESTIMATOR_CONFIG = GasEstimatorConfig()


@dataclass(frozen=True)
class GasEstimationResult:
    """Outcome of one simulated execution."""

    gas_used: int
    success: bool
    revert_data: bytes = b""


def calculate_call_data_gas(data: str) -> int:
    """Intrinsic gas charged for transaction calldata."""
    raw = bytes.fromhex(data.removeprefix("0x"))
    zero_bytes = raw.count(0)
    return zero_bytes * ZERO_BYTE_GAS + (len(raw) - zero_bytes) * NON_ZERO_BYTE_GAS


def apply_gas_buffer(gas: int, multiplier: Decimal = GAS_LIMIT_BUFFER_MULTIPLIER) -> int:
    """Scale a gas figure and round to the nearest integer."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return round_half_up_to_int(Decimal(gas) * multiplier)


def encode_fake_taker_execute(to: str, data: str) -> str:
    """Calldata for ``FakeTaker.execute(to, data)``."""
    encoded = encode(
        ["address", "bytes"],
        [bytes.fromhex(normalize_address(to)[2:]), bytes.fromhex(data.removeprefix("0x"))],
    )
    return "0x" + (FAKE_TAKER_EXECUTE_SELECTOR + encoded).hex()


class GasEstimator:
    """Conservative gas estimation for prepared swap transactions.

    Args:
        node: Node client used for estimation and simulation
        fake_taker_bytecode: Runtime code injected at the taker; empty disables
            override simulation
        supports_state_overrides: Whether the node accepts eth_call overrides
        config: Simulation multipliers and defaults
    """

    def __init__(
        self,
        node: NodeClient,
        *,
        fake_taker_bytecode: str = "",
        supports_state_overrides: bool = True,
        config: GasEstimatorConfig | None = None,
    ):
        self.node = node
        self.fake_taker_bytecode = fake_taker_bytecode
        self.use_overrides = supports_state_overrides and bool(fake_taker_bytecode)
        self.config = config or DEFAULT_GAS_ESTIMATOR_CONFIG

    async def estimate_gas_or_throw(self, tx: TxData) -> int:
        """Estimate gas for a transaction, raising on any detected failure.

        Args:
            tx: Transaction skeleton; ``from_`` must be the taker

        Returns:
            Gas used by the simulation plus calldata gas

        Raises:
            InsufficientFundsError: The node reported insufficient funds
            RevertError: The simulation reverted with a decodable reason
            GasEstimationError: The simulation failed without a decodable reason
            NodeTransportError: The node could not be reached
        """
        if tx.from_ is None:
            raise ValueError("Gas estimation requires a taker address")

        try:
            if self.use_overrides:
                result = await self.simulate_with_overrides(tx)
            else:
                result = await self.simulate_without_overrides(tx)
        except NodeError as e:
            self._raise_for_node_error(e)
            logger.warning("simulation_failed_undecodable", error=str(e))
            raise GasEstimationError() from e

        if result.revert_data:
            revert = decode_revert_error(result.revert_data)
            if revert is not None:
                raise revert
            if not result.success:
                logger.warning("revert_data_undecodable", data="0x" + result.revert_data.hex())

        gas_estimate = result.gas_used + calculate_call_data_gas(tx.data)
        if not result.success:
            raise GasEstimationError()
        return gas_estimate

    async def simulate_with_overrides(self, tx: TxData) -> GasEstimationResult:
        """Run the transaction through the fake taker with a state override."""
        if tx.from_ is None:
            raise ValueError("Simulation requires a taker address")
        gas, gas_price = await asyncio.gather(
            self._estimate_raw_gas(tx), self.node.get_gas_price()
        )
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            balance = floor_to_int(
                Decimal(tx.value + gas_price * gas) * self.config.balance_multiplier
            )

        taker = normalize_address(tx.from_)
        call = TxData(
            to=taker,
            data=encode_fake_taker_execute(tx.to, tx.data),
            from_=taker,
            value=tx.value,
            gas_price=gas_price,
            gas=gas,
        )
        overrides = {taker: StateOverride(code=self.fake_taker_bytecode, balance=balance)}
        raw = await self.node.call(call, overrides)

        try:
            success, result_data, gas_used = decode(
                FAKE_TAKER_RESULT_TYPES, bytes.fromhex(raw.removeprefix("0x"))
            )
        except (DecodingError, ValueError) as e:
            logger.warning("fake_taker_result_undecodable", result=raw)
            raise GasEstimationError() from e

        return GasEstimationResult(
            gas_used=gas_used,
            success=success,
            revert_data=b"" if success else result_data,
        )

    async def simulate_without_overrides(self, tx: TxData) -> GasEstimationResult:
        """Plain ``eth_call`` for nodes that cannot take overrides."""
        success = True
        try:
            gas = await self.node.estimate_gas(tx)
        except NodeError as e:
            logger.debug("estimate_gas_failed", error=str(e))
            success = False
            gas = self.config.validation_gas_limit

        try:
            raw = await self.node.call(
                TxData(
                    to=tx.to,
                    data=tx.data,
                    from_=tx.from_,
                    value=tx.value,
                    gas_price=tx.gas_price,
                    gas=gas,
                )
            )
        except NodeCallError as e:
            self._raise_for_node_error(e)
            logger.warning("plain_call_failed_undecodable", error=str(e))
            return GasEstimationResult(gas_used=gas, success=success)

        revert_data = bytes.fromhex(raw.removeprefix("0x")) if raw else b""
        return GasEstimationResult(gas_used=gas, success=success, revert_data=revert_data)

    async def _estimate_raw_gas(self, tx: TxData) -> int:
        try:
            estimate = await self.node.estimate_gas(tx)
        except NodeError as e:
            logger.debug("estimate_gas_failed", error=str(e))
            return self.config.default_gas_limit
        return apply_gas_buffer(estimate, self.config.estimate_gas_multiplier)

    def _raise_for_node_error(self, error: NodeError) -> None:
        """Raise the typed error a node failure maps to.

        Returns normally only for a call error whose payload is undecodable.
        """
        message = str(error)
        if "insufficient funds" in message:
            raise InsufficientFundsError() from error
        if isinstance(error, NodeCallError):
            revert = decode_revert_error(error.data)
            if revert is not None:
                raise revert from error
            return
        raise error


__all__ = [
    "DEFAULT_GAS_ESTIMATOR_CONFIG",
    "FAKE_TAKER_EXECUTE_SELECTOR",
    "GasEstimationResult",
    "GasEstimator",
    "GasEstimatorConfig",
    "apply_gas_buffer",
    "calculate_call_data_gas",
    "encode_fake_taker_execute",
]
