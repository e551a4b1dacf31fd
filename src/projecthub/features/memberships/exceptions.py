"""Domain errors raised by the membership lifecycle manager."""

from __future__ import annotations

import enum
from uuid import UUID

from projecthub.core.rbac.types import Capability


class MembershipErrorCode(str, enum.Enum):
    """Stable machine-readable codes for lifecycle failures."""

    NOT_A_MEMBER = "not_a_member"
    ALREADY_MEMBER = "already_member"
    FORBIDDEN = "forbidden"
    LAST_LEAD_VIOLATION = "last_lead_violation"


class MembershipError(Exception):
    """Base class for membership lifecycle failures.

    A failed operation never leaves partial state behind.
    """

    code: MembershipErrorCode

    def __init__(self, message: str, *, user_id: UUID, project_id: UUID) -> None:
        self.user_id = user_id
        self.project_id = project_id
        super().__init__(message)


class NotAMemberError(MembershipError):
    """No active membership exists for the user in the project."""

    code = MembershipErrorCode.NOT_A_MEMBER

    def __init__(self, *, user_id: UUID, project_id: UUID) -> None:
        super().__init__(
            f"User '{user_id}' is not a member of project '{project_id}'",
            user_id=user_id,
            project_id=project_id,
        )


class AlreadyMemberError(MembershipError):
    """An active membership already exists for the user in the project."""

    code = MembershipErrorCode.ALREADY_MEMBER

    def __init__(self, *, user_id: UUID, project_id: UUID) -> None:
        super().__init__(
            f"User '{user_id}' is already a member of project '{project_id}'",
            user_id=user_id,
            project_id=project_id,
        )


class MembershipForbiddenError(MembershipError):
    """The acting principal may not manage members of the project."""

    code = MembershipErrorCode.FORBIDDEN

    def __init__(
        self,
        *,
        actor_id: UUID,
        user_id: UUID,
        project_id: UUID,
        capability: Capability = Capability.MANAGE_MEMBERS,
    ) -> None:
        self.actor_id = actor_id
        self.capability = capability
        super().__init__(
            f"User '{actor_id}' lacks '{capability.value}' in project '{project_id}'",
            user_id=user_id,
            project_id=project_id,
        )


class LastLeadViolationError(MembershipError):
    """The change would leave a project with members but no active lead."""

    code = MembershipErrorCode.LAST_LEAD_VIOLATION

    def __init__(self, *, user_id: UUID, project_id: UUID) -> None:
        super().__init__(
            f"User '{user_id}' is the last lead of project '{project_id}'",
            user_id=user_id,
            project_id=project_id,
        )


__all__ = [
    "AlreadyMemberError",
    "LastLeadViolationError",
    "MembershipError",
    "MembershipErrorCode",
    "MembershipForbiddenError",
    "NotAMemberError",
]
