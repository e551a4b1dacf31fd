"""Application lifespan: schema bootstrap and engine disposal."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.engine import make_url
from starlette.types import Lifespan

from projecthub.infra.db.engine import create_all, get_engine, reset_database_state
from projecthub.settings import Settings

logger = logging.getLogger(__name__)


def create_application_lifespan(
    *,
    settings: Settings,
) -> Lifespan[FastAPI]:
    """Return the FastAPI lifespan handler used by the app factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        safe_url = make_url(settings.database_dsn).render_as_string(hide_password=True)
        logger.info("db.init.start", extra={"database_dsn": safe_url})
        await create_all(get_engine(settings))
        logger.info("db.init.complete", extra={"database_dsn": safe_url})
        try:
            yield
        finally:
            reset_database_state()

    return lifespan


__all__ = ["create_application_lifespan"]
