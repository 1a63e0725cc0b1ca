"""structlog setup for the API process."""

from __future__ import annotations

import logging
from typing import Any

import structlog

# Level name that silences all output
LOG_LEVEL_NOTHING = "NOTHING"


def drop_all_events(logger: Any, method_name: str, event_dict: Any) -> Any:
    """Processor that discards every event."""
    raise structlog.DropEvent


def configure_logging(level: str = "INFO", include_timestamp: bool = True) -> None:
    """Configure structlog for the running process.

    Args:
        level: DEBUG, INFO, WARNING, ERROR, CRITICAL or NOTHING
        include_timestamp: Whether to stamp each event with an ISO timestamp

    Raises:
        ValueError: If the level name is unknown
    """
    name = level.upper()
    silenced = name == LOG_LEVEL_NOTHING
    if silenced:
        numeric_level = logging.CRITICAL
    else:
        numeric_level = logging.getLevelName(name)
        if not isinstance(numeric_level, int):
            raise ValueError(f"Unknown log level: {level}")

    processors: list[structlog.types.Processor] = []
    if silenced:
        processors.append(drop_all_events)
    processors.append(structlog.processors.add_log_level)
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
