"""Logging configuration and helpers for ProjectHub.

This module configures console-style logging for the process and exposes
helpers for:

* binding a request-scoped correlation ID, and
* building consistent `extra` payloads for structured logs.

Everything uses the standard :mod:`logging` library. The only customization is
the formatter, which renders one human-readable line per log record, including
timestamp, level, logger name, correlation ID, and any `extra` fields as
``key=value`` pairs.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from projecthub.settings import Settings

# ---------------------------------------------------------------------------
# Context and constants
# ---------------------------------------------------------------------------

# Request-scoped correlation ID, set/cleared by RequestContextMiddleware.
_CORRELATION_ID: ContextVar[str | None] = ContextVar(
    "projecthub_correlation_id",
    default=None,
)

# Authenticated caller of the current request, when the token verifier set one.
_PRINCIPAL_ID: ContextVar[str | None] = ContextVar(
    "projecthub_principal_id",
    default=None,
)

# Attributes that are already handled by logging and should not be copied into
# the extra key=value list.
_STANDARD_ATTRS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "asctime",
    "correlation_id",
    "taskName",
    "color_message",
}

_CONFIGURED_FLAG = "_projecthub_configured"


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


class ConsoleLogFormatter(logging.Formatter):
    """Render log records as single-line console output.

    Example line:

        2026-10-18T09:12:03.118Z INFO  projecthub.features.memberships.service
        [cid=8c1f0a2e] membership.join.success project_id=... user_id=... role=MEMBER
    """

    _time_format = "%Y-%m-%dT%H:%M:%S"

    def __init__(self) -> None:
        fmt = "%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s"
        super().__init__(fmt=fmt, datefmt=self._time_format)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        pattern = datefmt or self._time_format
        base = dt.strftime(pattern)
        return f"{base}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - std signature
        cid = getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"
        record.correlation_id = cid
        principal_id = _PRINCIPAL_ID.get()
        if principal_id is not None and not hasattr(record, "principal_id"):
            record.principal_id = principal_id

        base = super().format(record)

        extras: list[str] = []
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            extras.append(f"{key}={_format_extra_value(value)}")

        if extras:
            return f"{base} " + " ".join(extras)
        return base


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure root logging for the ProjectHub process.

    Installs a single console-style StreamHandler and sets the root log level
    from ``settings.logging_level`` (env: ``PROJECTHUB_LOGGING_LEVEL``). Common
    third-party loggers (uvicorn, sqlalchemy) propagate into the same root
    logger so every line shares one format.
    """
    root_logger = logging.getLogger()

    level_name = settings.logging_level.upper()
    level = getattr(logging, level_name, logging.INFO)

    # Only fully configure once per process; subsequent calls just adjust level.
    if getattr(root_logger, _CONFIGURED_FLAG, False):
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(ConsoleLogFormatter())

    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name in (
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "sqlalchemy",
    ):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True

    setattr(root_logger, _CONFIGURED_FLAG, True)


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def bind_request_context(
    correlation_id: str | None,
    *,
    principal_id: UUID | str | None = None,
) -> None:
    """Bind the correlation ID and calling principal for the current request.

    Once bound, every record formatted in this context carries
    ``principal_id=...`` unless the call site supplied its own.
    """
    _CORRELATION_ID.set(correlation_id)
    _PRINCIPAL_ID.set(str(principal_id) if principal_id is not None else None)


def clear_request_context() -> None:
    """Clear the request-scoped logging context."""
    _CORRELATION_ID.set(None)
    _PRINCIPAL_ID.set(None)


def current_correlation_id() -> str | None:
    return _CORRELATION_ID.get()


def log_context(
    *,
    project_id: UUID | str | None = None,
    user_id: UUID | str | None = None,
    actor_id: UUID | str | None = None,
    capability: Enum | str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a consistent `extra` payload for structured logs.

    Example:
        logger.info(
            "membership.join.success",
            extra=log_context(project_id=project_id, user_id=user_id, role=role),
        )
    """
    ctx: dict[str, Any] = {}

    if project_id is not None:
        ctx["project_id"] = str(project_id)
    if user_id is not None:
        ctx["user_id"] = str(user_id)
    if actor_id is not None:
        ctx["actor_id"] = str(actor_id)
    if capability is not None:
        ctx["capability"] = capability.value if isinstance(capability, Enum) else capability

    for key, value in extra.items():
        ctx[key] = value.value if isinstance(value, Enum) else value

    return ctx


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _format_extra_value(value: Any) -> str:
    """Format an `extra` value for console output."""
    if isinstance(value, (int, float, bool)):
        return str(value)
    if value is None:
        return "null"
    return str(value)


__all__ = [
    "ConsoleLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "current_correlation_id",
    "log_context",
    "setup_logging",
]
