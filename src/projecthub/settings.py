"""ProjectHub settings (Pydantic v2 settings loaded from the environment)."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---- Defaults ---------------------------------------------------------------

DEFAULT_DATABASE_DSN = "sqlite+aiosqlite:///./data/db/projecthub.sqlite"
DEFAULT_LOCK_TIMEOUT = timedelta(seconds=10)

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]


# ---- Helpers ----------------------------------------------------------------

def _parse_duration(value: Any, *, field_name: str) -> timedelta:
    """Accept seconds (int/float/str) or '60s'/'5m'/'1h'/'14d'."""
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError(f"{field_name} must not be blank")
        try:
            seconds = float(s)
        except ValueError:
            unit = s[-1].lower()
            num = s[:-1].strip()
            if unit not in _UNIT_SECONDS or not num:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from None
            try:
                seconds = float(num) * _UNIT_SECONDS[unit]
            except ValueError as exc:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from exc
    else:
        raise TypeError(f"{field_name} must be number, duration string, or timedelta")
    if seconds <= 0:
        raise ValueError(f"{field_name} must be > 0 seconds")
    return timedelta(seconds=seconds)


# ---- Settings ---------------------------------------------------------------

class Settings(BaseSettings):
    """ProjectHub configuration loaded from ``PROJECTHUB_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PROJECTHUB_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    debug: bool = Field(default=False, description="Enable FastAPI debug mode.")
    app_name: str = Field(default="ProjectHub Access API", description="Human readable API name.")
    app_version: str = Field(default="0.1.0", description="API version string.")
    api_docs_enabled: bool = Field(default=False, description="Expose interactive API documentation endpoints.")
    docs_url: str = Field(default="/docs", description="Swagger UI mount point.")
    openapi_url: str = Field(default="/openapi.json", description="OpenAPI schema endpoint.")
    logging_level: LogLevel = Field(
        default="INFO",
        description="Root log level for the process.",
    )

    database_dsn: str = Field(
        default=DEFAULT_DATABASE_DSN,
        description="SQLAlchemy database URL for the membership store.",
    )
    database_echo: bool = Field(
        default=False,
        description="Enable SQLAlchemy engine echo logging.",
    )
    database_pool_timeout: int = Field(
        default=30,
        gt=0,
        description="SQLAlchemy pool timeout in seconds.",
    )

    membership_lock_timeout: timedelta = Field(
        default=DEFAULT_LOCK_TIMEOUT,
        description="Upper bound on waiting for a per-membership mutation lock.",
    )

    @field_validator("logging_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("membership_lock_timeout", mode="before")
    @classmethod
    def _parse_lock_timeout(cls, value: Any) -> timedelta:
        return _parse_duration(value, field_name="membership_lock_timeout")

    @field_validator("database_dsn")
    @classmethod
    def _require_dsn(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("database_dsn must not be blank")
        return candidate


@lru_cache(maxsize=1)
def _build_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build_settings()


def reload_settings() -> Settings:
    _build_settings.cache_clear()
    return _build_settings()


__all__ = [
    "DEFAULT_DATABASE_DSN",
    "DEFAULT_LOCK_TIMEOUT",
    "LogLevel",
    "Settings",
    "get_settings",
    "reload_settings",
]
