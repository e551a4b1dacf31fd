"""HTTP adapters for the access core (dependencies and error mapping)."""

from .dependencies import (
    CurrentPrincipal,
    get_current_principal,
    get_current_user_id,
    get_lifecycle_manager,
    require_capability,
)
from .errors import register_auth_exception_handlers

__all__ = [
    "CurrentPrincipal",
    "get_current_principal",
    "get_current_user_id",
    "get_lifecycle_manager",
    "register_auth_exception_handlers",
    "require_capability",
]
