"""Shared auth/permission error types."""

from __future__ import annotations

from uuid import UUID

from projecthub.core.rbac.types import AuthorizationDecision


class AuthenticationError(Exception):
    """Raised when a request cannot be attributed to a principal."""


class PrincipalNotFoundError(LookupError):
    """Raised by the account collaborator when a user id is unknown."""

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id
        super().__init__(f"Principal '{user_id}' not found")


class StoreUnavailableError(Exception):
    """A collaborator (membership store, lock, account service) failed.

    Surfaced unchanged through the gate; never reinterpreted as a denial.
    """

    code = "unavailable"


class PermissionDeniedError(Exception):
    """Raised when a principal lacks a required capability."""

    def __init__(
        self,
        decision: AuthorizationDecision,
        *,
        project_id: UUID | None = None,
    ) -> None:
        self.decision = decision
        self.project_id = project_id
        msg = f"Capability '{decision.capability.value}' denied"
        if decision.reason is not None:
            msg = f"{msg} ({decision.reason.value})"
        super().__init__(msg)


__all__ = [
    "AuthenticationError",
    "PermissionDeniedError",
    "PrincipalNotFoundError",
    "StoreUnavailableError",
]
