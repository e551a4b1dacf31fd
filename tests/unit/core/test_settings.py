from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from projecthub.settings import (
    DEFAULT_DATABASE_DSN,
    DEFAULT_LOCK_TIMEOUT,
    Settings,
    get_settings,
    reload_settings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "PROJECTHUB_DATABASE_DSN",
        "PROJECTHUB_LOGGING_LEVEL",
        "PROJECTHUB_MEMBERSHIP_LOCK_TIMEOUT",
        "PROJECTHUB_API_DOCS_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    reload_settings()


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.database_dsn == DEFAULT_DATABASE_DSN
    assert settings.membership_lock_timeout == DEFAULT_LOCK_TIMEOUT
    assert settings.logging_level == "INFO"
    assert settings.api_docs_enabled is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROJECTHUB_DATABASE_DSN", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("PROJECTHUB_LOGGING_LEVEL", " debug ")
    monkeypatch.setenv("PROJECTHUB_API_DOCS_ENABLED", "true")

    settings = Settings(_env_file=None)

    assert settings.database_dsn == "sqlite+aiosqlite:///:memory:"
    assert settings.logging_level == "DEBUG"
    assert settings.api_docs_enabled is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (5, timedelta(seconds=5)),
        ("2.5", timedelta(seconds=2.5)),
        ("30s", timedelta(seconds=30)),
        ("2m", timedelta(minutes=2)),
        ("1h", timedelta(hours=1)),
        (timedelta(seconds=3), timedelta(seconds=3)),
    ],
)
def test_lock_timeout_accepts_durations(raw, expected) -> None:
    settings = Settings(_env_file=None, membership_lock_timeout=raw)

    assert settings.membership_lock_timeout == expected


@pytest.mark.parametrize("raw", ["", "0", "-1s", "5w", "abc", "s"])
def test_lock_timeout_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, membership_lock_timeout=raw)


def test_blank_dsn_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_dsn="   ")


def test_get_settings_is_cached_until_reload(monkeypatch: pytest.MonkeyPatch) -> None:
    first = reload_settings()
    assert get_settings() is first

    monkeypatch.setenv("PROJECTHUB_LOGGING_LEVEL", "ERROR")
    assert get_settings() is first

    reloaded = reload_settings()
    assert reloaded is not first
    assert reloaded.logging_level == "ERROR"
