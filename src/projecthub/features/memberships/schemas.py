"""Schemas for project membership requests and responses."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from projecthub.common.schema import BaseSchema
from projecthub.core.rbac.types import ProjectRole


class MembershipOut(BaseSchema):
    """One membership row; ``left_at`` is omitted while the membership is active."""

    id: UUID
    user_id: UUID
    project_id: UUID
    role: ProjectRole
    joined_at: datetime
    left_at: datetime | None = None


class MemberCreate(BaseSchema):
    """Payload for a lead adding someone to the project."""

    user_id: UUID
    role: ProjectRole = ProjectRole.MEMBER


class MemberJoin(BaseSchema):
    """Payload for joining a project yourself."""

    role: ProjectRole = Field(
        default=ProjectRole.MEMBER,
        description="Self-service joins cannot claim the lead role.",
    )

    @field_validator("role")
    @classmethod
    def _reject_lead(cls, value: ProjectRole | str) -> ProjectRole | str:
        if value == ProjectRole.LEAD:
            raise ValueError("Leads are appointed, not self-selected")
        return value


class MemberRoleUpdate(BaseSchema):
    """Payload for changing a member's project role."""

    role: ProjectRole


__all__ = ["MemberCreate", "MemberJoin", "MemberRoleUpdate", "MembershipOut"]
