"""Common utilities and helpers used across ProjectHub."""

__all__ = [
    "exceptions",
    "ids",
    "logging",
    "middleware",
    "schema",
    "time",
]
