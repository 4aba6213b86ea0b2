"""
Logging for WithYou: structlog over stdlib.

The registrar logs structured events (``device_registration_retrying``,
``device_registration_failed`` ...) with key/value context; the store and
config use plain ``logging.getLogger(__name__)``. Both end up on stderr
through one ProcessorFormatter, so the CLI's stdout stays clean JSON.

Environment:
    WITHYOU_LOG_LEVEL   - DEBUG, INFO (default), WARNING, ...
    WITHYOU_LOG_FORMAT  - "json" for JSON lines, anything else for console

httpx logs every request at INFO; it is held at WARNING unless the chosen
level is DEBUG.

Usage:
    from withyou.logging_config import get_logger, setup_logging
    setup_logging()
    get_logger(__name__).info("device_registered", timezone="Europe/Dublin")
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

ENV_LOG_LEVEL = "WITHYOU_LOG_LEVEL"
ENV_LOG_FORMAT = "WITHYOU_LOG_FORMAT"

NOISY_LOGGERS = ("httpx", "httpcore")


def _resolve_level(level: str | None) -> int:
    name = (level or os.environ.get(ENV_LOG_LEVEL) or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    numeric_level = _resolve_level(level)
    if json_output is None:
        json_output = os.environ.get(ENV_LOG_FORMAT, "").lower() == "json"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # foreign_pre_chain gives stdlib records the same timestamp/level/name
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    quiet_level = numeric_level if numeric_level <= logging.DEBUG else max(numeric_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
