"""Fallback exception handlers for errors the access core does not map itself."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from .middleware import request_log_context

_UNHANDLED_LOGGER = logging.getLogger("projecthub.errors")
_HTTP_LOGGER = logging.getLogger("projecthub.http")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Turn an unexpected exception into a 500 that quotes the request id.

    The ERROR record carries the stack trace plus the calling principal and
    target project, so a report quoting ``request_id`` leads straight to it.
    """
    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=request_log_context(request, exception_type=type(exc).__name__),
    )
    content: dict[str, str] = {"detail": "Internal server error"}
    request_id = getattr(request.state, "correlation_id", None)
    if request_id is not None:
        content["request_id"] = request_id
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render ``HTTPException`` as ``{"detail": ...}``; only 5xx responses are logged."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        _HTTP_LOGGER.error(
            "http_exception",
            extra=request_log_context(request, status_code=exc.status_code, detail=exc.detail),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


__all__ = [
    "http_exception_handler",
    "unhandled_exception_handler",
]
