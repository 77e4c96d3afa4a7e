from __future__ import annotations

"""
Structured logging setup for the animal chaincode.

This module configures **structlog** + the stdlib ``logging`` package so that:
- Library modules keep using ``logging.getLogger(__name__)``; their records are
  rendered by structlog processors (JSON or console).
- Context variables (transaction id, function name) bound by the dispatcher
  are merged into each event.
- Log level & format are configurable via environment variables.
- ``get_logger()`` returns a native structlog logger rendered by the same handler.

Quick start
-----------
    from animal_chaincode.logging import get_logger, setup_logging, tx_context

    setup_logging()  # call once on process start
    with tx_context(tx_id="tx-1", function="InitLedger"):
        logging.getLogger(__name__).info("ledger seeded")

Environment
-----------
- LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_FORMAT: "json" (default) or "console"
- LOG_INCLUDE_STACKTRACE: "1" to include stack traces in logs (default: 1 for json, 0 for console)
"""

import logging
import os
from typing import Any, ContextManager, Dict, Iterable, Mapping, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer

SERVICE_NAME = "animal-chaincode"


def _base_processors(service_name: str, include_stacktrace: bool) -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    if include_stacktrace:
        yield structlog.processors.format_exc_info
    yield structlog.processors.UnicodeDecoder()

    def _ensure_service(_: logging.Logger, __: str, ev: Dict[str, Any]) -> Dict[str, Any]:
        ev.setdefault("service", service_name)
        return ev

    yield _ensure_service


def setup_logging(
    *,
    service_name: str = SERVICE_NAME,
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
    include_stacktrace: Optional[bool] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once; the
    root handler is replaced on every call.

    Parameters
    ----------
    service_name: str
        Value injected as "service" into every event.
    level: str|int
        Log level (e.g., "INFO"). Defaults to $LOG_LEVEL or INFO.
    log_format: str
        "json" (default) or "console". Defaults to $LOG_FORMAT or "json".
    include_stacktrace: bool
        Include stack traces for records with exc_info. Defaults to True for
        JSON and False for console, or $LOG_INCLUDE_STACKTRACE if defined.
    """
    env_level = os.getenv("LOG_LEVEL", "").upper() or None
    env_format = os.getenv("LOG_FORMAT", "").lower() or None
    env_stack = os.getenv("LOG_INCLUDE_STACKTRACE")

    level = level or env_level or "INFO"
    if isinstance(level, str):
        level = level.upper()
    log_format = (log_format or env_format or "json").lower()
    if include_stacktrace is None:
        if env_stack is not None:
            include_stacktrace = env_stack.strip() in ("1", "true", "yes", "on")
        else:
            include_stacktrace = log_format == "json"

    processors = list(_base_processors(service_name, include_stacktrace))

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)
    else:
        renderer = JSONRenderer(sort_keys=True)

    # Native structlog loggers hand their events to the stdlib handler below.
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # stdlib records go through the structlog chain; stderr keeps stdout clean for CLI payloads.
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.ExtraAdder(),
                *processors,
            ],
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger backed by the stdlib logger ``name``.
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def tx_context(**kv: Any) -> ContextManager[Mapping[str, Any]]:
    """
    Bind transaction-scoped key/value pairs (tx_id, function, ...) into the
    structlog contextvars store for the duration of a ``with`` block.
    """
    return structlog.contextvars.bound_contextvars(**kv)


__all__ = [
    "SERVICE_NAME",
    "setup_logging",
    "get_logger",
    "tx_context",
]
