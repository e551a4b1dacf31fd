"""Exception handlers that translate auth and membership errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from projecthub.common.middleware import request_log_context
from projecthub.features.memberships.exceptions import MembershipError, MembershipErrorCode

from ..auth.errors import (
    AuthenticationError,
    PermissionDeniedError,
    PrincipalNotFoundError,
    StoreUnavailableError,
)

_LOGGER = logging.getLogger("projecthub.http")

MEMBERSHIP_STATUS: dict[MembershipErrorCode, int] = {
    MembershipErrorCode.NOT_A_MEMBER: status.HTTP_404_NOT_FOUND,
    MembershipErrorCode.ALREADY_MEMBER: status.HTTP_409_CONFLICT,
    MembershipErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    MembershipErrorCode.LAST_LEAD_VIOLATION: status.HTTP_409_CONFLICT,
}


def _handle_authentication_error(_request: Request, exc: AuthenticationError) -> JSONResponse:
    """Translate auth failures into HTTP 401 responses."""

    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc) or "Authentication required"},
    )


def _handle_permission_error(_request: Request, exc: PermissionDeniedError) -> JSONResponse:
    """Translate capability denials into HTTP 403 responses."""

    decision = exc.decision
    detail = {
        "error": "forbidden",
        "capability": decision.capability.value,
        "reason": decision.reason.value if decision.reason is not None else None,
        "project_id": str(exc.project_id) if exc.project_id is not None else None,
    }
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": detail},
    )


def _handle_membership_error(_request: Request, exc: MembershipError) -> JSONResponse:
    return JSONResponse(
        status_code=MEMBERSHIP_STATUS[exc.code],
        content={"detail": {"error": exc.code.value, "message": str(exc)}},
    )


def _handle_principal_not_found(_request: Request, exc: PrincipalNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": {"error": "principal_not_found", "message": str(exc)}},
    )


def _handle_store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    _LOGGER.error(
        "store.unavailable",
        extra=request_log_context(request, detail=str(exc)),
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": {"error": StoreUnavailableError.code, "message": str(exc)}},
    )


def register_auth_exception_handlers(app: FastAPI) -> None:
    """Attach auth, RBAC, and membership handlers to the FastAPI app."""

    app.add_exception_handler(AuthenticationError, _handle_authentication_error)
    app.add_exception_handler(PermissionDeniedError, _handle_permission_error)
    app.add_exception_handler(MembershipError, _handle_membership_error)
    app.add_exception_handler(PrincipalNotFoundError, _handle_principal_not_found)
    app.add_exception_handler(StoreUnavailableError, _handle_store_unavailable)


__all__ = ["MEMBERSHIP_STATUS", "register_auth_exception_handlers"]
