"""Identity representation consumed by the authorization core."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from projecthub.core.rbac.types import GlobalRole


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated user making a request.

    Owned by the account collaborator; the authorization core only reads it.
    """

    user_id: UUID
    global_role: GlobalRole
    is_active: bool = True


__all__ = ["Principal"]
