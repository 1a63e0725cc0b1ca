"""Process configuration loaded from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from swap_api.chains import ChainId
from swap_api.constants import DEFAULT_HTTP_PORT, DEFAULT_RPC_TIMEOUT_MS, NULL_ADDRESS
from swap_api.models.types import is_valid_address, normalize_address

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class Settings:
    """Immutable settings for one API process.

    Attributes:
        chain_id: Chain the process serves
        rpc_urls: JSON-RPC endpoints of the node (one is picked per request)
        rpc_timeout_ms: Per-request timeout towards the node
        http_host: Interface to bind
        http_port: Port to bind
        fee_recipient_address: Default affiliate for calldata attribution
        exchange_proxy_address: Optional override of the chain's exchange proxy
        fake_taker_bytecode: Code injected at the taker during gas simulation
        routing_engine_factory: ``module:callable`` building the routing engine
        log_level: structlog level name
        logger_include_timestamp: Whether log lines carry a timestamp
    """

    chain_id: ChainId = ChainId.MAINNET
    rpc_urls: tuple[str, ...] = field(default_factory=tuple)
    rpc_timeout_ms: int = DEFAULT_RPC_TIMEOUT_MS
    http_host: str = "0.0.0.0"
    http_port: int = DEFAULT_HTTP_PORT
    fee_recipient_address: str = NULL_ADDRESS
    exchange_proxy_address: str | None = None
    fake_taker_bytecode: str = ""
    routing_engine_factory: str | None = None
    log_level: str = "INFO"
    logger_include_timestamp: bool = True


def _int_var(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from err


def _address_var(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(name)
    if not raw:
        return None
    if not is_valid_address(raw):
        raise ValueError(f"{name} must be an address, got {raw!r}")
    return normalize_address(raw)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment.

    Args:
        env: Mapping to read from (default: ``os.environ``)

    Returns:
        The loaded settings

    Raises:
        ValueError: If a variable holds an invalid value
    """
    env = os.environ if env is None else env

    chain_id = _int_var(env, "CHAIN_ID", int(ChainId.MAINNET))
    try:
        chain = ChainId(chain_id)
    except ValueError as err:
        raise ValueError(f"CHAIN_ID {chain_id} is not a supported chain") from err

    http_port = _int_var(env, "HTTP_PORT", DEFAULT_HTTP_PORT)
    if not 0 <= http_port <= 65535:
        raise ValueError(f"HTTP_PORT must be within 0..65535, got {http_port}")

    rpc_timeout_ms = _int_var(env, "ETHEREUM_RPC_TIMEOUT_MS", DEFAULT_RPC_TIMEOUT_MS)
    if rpc_timeout_ms <= 0:
        raise ValueError(f"ETHEREUM_RPC_TIMEOUT_MS must be positive, got {rpc_timeout_ms}")

    rpc_urls = tuple(u.strip() for u in env.get("ETHEREUM_RPC_URL", "").split(",") if u.strip())

    bytecode = env.get("FAKE_TAKER_BYTECODE", "").strip()
    if bytecode and not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    if bytecode:
        try:
            bytes.fromhex(bytecode[2:])
        except ValueError as err:
            raise ValueError("FAKE_TAKER_BYTECODE must be hex") from err

    return Settings(
        chain_id=chain,
        rpc_urls=rpc_urls,
        rpc_timeout_ms=rpc_timeout_ms,
        http_host=env.get("HTTP_HOST", "0.0.0.0"),
        http_port=http_port,
        fee_recipient_address=_address_var(env, "FEE_RECIPIENT_ADDRESS") or NULL_ADDRESS,
        exchange_proxy_address=_address_var(env, "EXCHANGE_PROXY_ADDRESS"),
        fake_taker_bytecode=bytecode,
        routing_engine_factory=env.get("ROUTING_ENGINE_FACTORY") or None,
        log_level=env.get("LOG_LEVEL", "INFO"),
        logger_include_timestamp=env.get("LOGGER_INCLUDE_TIMESTAMP", "true").lower() in _TRUTHY,
    )
