"""Observability setup: stdlib logging routed into Pydantic Logfire.

Modules log through ``logging.getLogger(__name__)``. Once ``configure_logfire``
has run, those records reach logfire together with the spans that services
open with ``span()``.
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import Settings


# Chatty at INFO: one line per HTTP request or SQL statement
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def configure_logfire(settings: Settings) -> None:
    """Configure logfire and attach it to the root logger.

    Without a token nothing leaves the process; records are still printed locally.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="flatmate",
        service_version="0.1.0",
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(
        handlers=[logfire.LogfireLoggingHandler()],
        level=settings.log_level.upper(),
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": settings.log_level, "export": bool(settings.logfire_token)},
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request handled by ``app``."""
    logfire.instrument_fastapi(app)


def span(name: str, **attributes: object) -> logfire.LogfireSpan:
    """Open a logfire span around a service operation.

    Usage:
        with span("expense_service.record_expense"):
            ...
    """
    return logfire.span(name, **attributes)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: object) -> None:
    """Log ``message`` at ``level`` with ``context`` attached as structured extra fields.

    Usage:
        log_with_context(logger, "info", "Handling command", command="balance", participant_id="+4915...")
    """
    logger.log(logging.getLevelName(level.upper()), message, extra=context)
