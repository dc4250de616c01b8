"""Structured logging for the certificate renderer.

Application code logs through structlog with dotted event names
(``certificate.generated``, ``browser.close.failed``). Records from stdlib
loggers (uvicorn, Playwright, ``main``) pass through the same formatter, and
their ``extra=`` fields become keys in the output.

Environment:
    LOG_LEVEL   standard level name; INFO when unset or unknown
    LOG_FORMAT  ``json`` for one JSON object per line, otherwise console output

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("certificate.generated", certificate_id="123")
"""

import logging
import os
import sys

import structlog
from structlog.types import Processor

# Only WARNING and above from these reach the handler.
QUIET_LOGGERS = ("uvicorn.access", "asyncio", "playwright")

# Binds keys (e.g. certificate_id) to every log line inside a ``with`` block.
bound_contextvars = structlog.contextvars.bound_contextvars

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _log_level() -> int:
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _output_processors(json_output: bool) -> list[Processor]:
    if json_output:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging() -> None:
    """Send structlog and stdlib records to a single stdout handler.

    Calling it again replaces the root handlers, so it is safe at import
    time in both ``main`` and ``cli``.
    """
    json_output = os.environ.get("LOG_FORMAT", "").lower() == "json"

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*_SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_output_processors(json_output),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(_log_level())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.stdlib.get_logger(name)
