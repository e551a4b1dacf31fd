"""Smoke tests for logging helpers and exception handlers."""

from __future__ import annotations

import json
import logging
from uuid import uuid4

from starlette.requests import Request

from projecthub.common.exceptions import unhandled_exception_handler
from projecthub.common.logging import (
    ConsoleLogFormatter,
    bind_request_context,
    clear_request_context,
    current_correlation_id,
    log_context,
    setup_logging,
)
from projecthub.core.rbac.types import Capability, ProjectRole
from projecthub.settings import Settings


class _CaptureHandler(logging.Handler):
    """Handler that stores log records and formatted strings."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.formatted: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        msg = self.format(record)
        self.records.append(record)
        self.formatted.append(msg)


def test_log_context_stringifies_ids_and_enums():
    user_id, project_id = uuid4(), uuid4()

    ctx = log_context(
        user_id=user_id,
        project_id=project_id,
        capability=Capability.MANAGE_MEMBERS,
        role=ProjectRole.LEAD,
        attempts=2,
    )

    assert ctx == {
        "user_id": str(user_id),
        "project_id": str(project_id),
        "capability": "ManageMembers",
        "role": "LEAD",
        "attempts": 2,
    }
    assert "actor_id" not in log_context(actor_id=None)


def test_console_formatter_includes_correlation_and_fields():
    setup_logging(Settings(_env_file=None, logging_level="DEBUG"))
    handler = _CaptureHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(ConsoleLogFormatter())
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        bind_request_context("cid-123", principal_id="user-7")
        assert current_correlation_id() == "cid-123"
        logger = logging.getLogger("test.logging")
        logger.info(
            "membership.join.success",
            extra=log_context(role=ProjectRole.MEMBER, left_at=None),
        )

        assert handler.records, "Log record not captured"
        record = handler.records[-1]
        assert getattr(record, "correlation_id", None) == "cid-123"
        assert getattr(record, "role", None) == "MEMBER"
        line = handler.formatted[-1]
        assert "[cid=cid-123] membership.join.success" in line
        assert "role=MEMBER" in line
        assert "left_at=null" in line
        assert "principal_id=user-7" in line
        assert line.split(" ", 1)[0].endswith("Z")
    finally:
        clear_request_context()
        root.removeHandler(handler)

    assert current_correlation_id() is None


def test_setup_logging_is_idempotent_and_adjusts_level():
    root = logging.getLogger()
    setup_logging(Settings(_env_file=None, logging_level="INFO"))
    handlers = list(root.handlers)

    setup_logging(Settings(_env_file=None, logging_level="warning"))

    assert root.handlers == handlers
    assert root.level == logging.WARNING
    setup_logging(Settings(_env_file=None, logging_level="INFO"))


async def test_unhandled_exception_handler_logs_with_correlation():
    setup_logging(Settings(_env_file=None, logging_level="DEBUG"))
    handler = _CaptureHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(ConsoleLogFormatter())
    error_logger = logging.getLogger("projecthub.errors")
    error_logger.disabled = False
    error_logger.addHandler(handler)

    scope = {
        "type": "http",
        "method": "GET",
        "path": "/boom",
        "headers": [],
        "scheme": "http",
        "server": ("testserver", 80),
        "path_params": {"projectId": "proj-9"},
        "state": {"user_id": "user-3", "correlation_id": "exc-1"},
    }
    request = Request(scope)
    try:
        bind_request_context("exc-1")
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            response = await unhandled_exception_handler(request, exc)

        assert response.status_code == 500
        assert json.loads(response.body.decode()) == {
            "detail": "Internal server error",
            "request_id": "exc-1",
        }
        error_logs = [r for r in handler.records if r.name == "projecthub.errors"]
        assert error_logs, "Unhandled exception log not captured"
        record = error_logs[-1]
        assert record.getMessage() == "unhandled_exception"
        assert getattr(record, "path", None) == "/boom"
        assert getattr(record, "exception_type", None) == "RuntimeError"
        assert getattr(record, "project_id", None) == "proj-9"
        assert getattr(record, "principal_id", None) == "user-3"
        assert record.exc_info and record.exc_info[0] is RuntimeError
        assert "[cid=exc-1]" in handler.formatted[-1]
    finally:
        clear_request_context()
        error_logger.removeHandler(handler)
