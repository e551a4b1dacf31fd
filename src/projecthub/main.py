"""ProjectHub FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from projecthub.common.exceptions import http_exception_handler, unhandled_exception_handler
from projecthub.common.logging import setup_logging
from projecthub.common.middleware import register_middleware
from projecthub.core.http import register_auth_exception_handlers
from projecthub.core.rbac.gate import EnforcementGate
from projecthub.features.access.directory import PrincipalLoader, ProjectDirectory
from projecthub.features.memberships.locks import KeyedLocks
from projecthub.features.memberships.router import me_router
from projecthub.features.memberships.router import router as memberships_router

from .lifecycles import create_application_lifespan
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    principal_loader: PrincipalLoader,
    projects: ProjectDirectory,
) -> FastAPI:
    """Return a configured FastAPI application.

    ``principal_loader`` and ``projects`` are the account and project
    collaborators; this service does not own either record.
    """

    settings = settings or get_settings()
    setup_logging(settings)

    docs_url = settings.docs_url if settings.api_docs_enabled else None
    openapi_url = settings.openapi_url if settings.api_docs_enabled else None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=docs_url,
        redoc_url=None,
        openapi_url=openapi_url,
        debug=settings.debug,
        lifespan=create_application_lifespan(settings=settings),
    )

    app.state.settings = settings
    app.state.gate = EnforcementGate()
    app.state.membership_locks = KeyedLocks(timeout=settings.membership_lock_timeout)
    app.state.principal_loader = principal_loader
    app.state.projects = projects

    register_middleware(app)
    register_auth_exception_handlers(app)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(memberships_router)
    app.include_router(me_router)
    logger.debug("app.created", extra={"app_name": settings.app_name})
    return app


__all__ = ["create_app"]
