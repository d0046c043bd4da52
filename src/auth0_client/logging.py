"""Structured logging for the Auth0 client.

The library only emits events; it never configures logging on import.
Applications that have no structlog setup of their own can call
`configure_logging()` once at startup.

Events use snake_case names with key/value context, e.g.::

    logger.info("jwks_fetched", url=url, keys_count=3)

Secrets (client secret, passwords, raw tokens) are never passed to a logger.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(level: str = "info", *, json: bool = False) -> None:
    """Route structlog through stdlib logging with a console or JSON renderer.

    Args:
        level: Stdlib level name, case-insensitive ("debug", "INFO", ...).
        json: Render events as JSON lines instead of colored console output.

    Raises:
        ValueError: If `level` is not a known logging level name.
    """
    levels = logging.getLevelNamesMapping()
    if level.upper() not in levels:
        raise ValueError(f"Unknown log level {level!r}")

    renderer: Any = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=levels[level.upper()],
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger bound to `name`."""
    return structlog.get_logger(name)
