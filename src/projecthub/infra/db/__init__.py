"""Database plumbing (SQLAlchemy engines, sessions, declarative base)."""

from .base import NAMING_CONVENTION, Base, metadata
from .engine import create_all, get_engine, reset_database_state
from .session import get_session, get_sessionmaker, reset_session_state

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "metadata",
    "create_all",
    "get_engine",
    "reset_database_state",
    "get_session",
    "get_sessionmaker",
    "reset_session_state",
]
