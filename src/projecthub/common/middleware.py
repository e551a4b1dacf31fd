"""Request correlation and access logging for the ProjectHub API."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Request, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .ids import generate_uuid7
from .logging import bind_request_context, clear_request_context, log_context

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_LOGGER = logging.getLogger("projecthub.request")

_DENIED_STATUSES = frozenset({status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN})


def request_log_context(request: Request, **extra: Any) -> dict[str, Any]:
    """Describe ``request`` in terms of who called it and which project it targets.

    ``request.state.user_id`` is set by the upstream token verifier and the
    ``projectId`` path parameter is only present once routing has happened.
    """

    return log_context(
        project_id=request.path_params.get("projectId"),
        principal_id=getattr(request.state, "user_id", None),
        method=request.method,
        path=request.url.path,
        **extra,
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request/caller ids for logging and emit one summary line per request.

    Authorization failures are logged as ``request.denied`` so they can be
    told apart from ordinary traffic; server errors as ``request.failed``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(generate_uuid7())
        request.state.correlation_id = request_id
        bind_request_context(
            request_id,
            principal_id=getattr(request.state, "user_id", None),
        )
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                # Stack trace is logged by the catch-all handler.
                _REQUEST_LOGGER.error(
                    "request.failed",
                    extra=request_log_context(request, duration_ms=_elapsed_ms(started)),
                )
                raise

            status_code = response.status_code
            if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
                level, event = logging.ERROR, "request.failed"
            elif status_code in _DENIED_STATUSES:
                level, event = logging.INFO, "request.denied"
            else:
                level, event = logging.INFO, "request.complete"
            _REQUEST_LOGGER.log(
                level,
                event,
                extra=request_log_context(
                    request,
                    status_code=status_code,
                    duration_ms=_elapsed_ms(started),
                ),
            )
        finally:
            clear_request_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000.0, 2)


def register_middleware(app: FastAPI) -> None:
    """Register default middleware on the FastAPI application."""

    app.add_middleware(RequestContextMiddleware)


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestContextMiddleware",
    "register_middleware",
    "request_log_context",
]
