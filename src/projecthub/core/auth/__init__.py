"""Principal and auth error types shared by the access core."""

from .errors import (
    AuthenticationError,
    PermissionDeniedError,
    PrincipalNotFoundError,
    StoreUnavailableError,
)
from .principal import Principal

__all__ = [
    "AuthenticationError",
    "PermissionDeniedError",
    "Principal",
    "PrincipalNotFoundError",
    "StoreUnavailableError",
]
