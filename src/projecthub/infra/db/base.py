"""Declarative base for the ProjectHub membership schema."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, MetaData, Uuid
from sqlalchemy.orm import DeclarativeBase

# Explicitly named indexes (``ux_*`` for partial unique ones) bypass these.
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    """Base for ProjectHub tables.

    ``UUID`` annotations become :class:`~sqlalchemy.Uuid` columns (native on
    PostgreSQL, ``CHAR(32)`` elsewhere) and every ``datetime`` column is
    timezone-aware.
    """

    metadata = metadata
    type_annotation_map = {
        UUID: Uuid(as_uuid=True),
        datetime: DateTime(timezone=True),
    }


__all__ = ["Base", "NAMING_CONVENTION", "metadata"]
