"""Project membership rows (one per join; ``left_at`` closes a row)."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, text
from sqlalchemy.orm import Mapped, mapped_column

from projecthub.common.ids import generate_uuid7
from projecthub.common.time import utc_now
from projecthub.core.rbac.types import Membership, ProjectRole
from projecthub.infra.db import Base

# Partial unique index enforcing one active row per (user, project).
ACTIVE_MEMBERSHIP_INDEX = "ux_project_memberships_active"


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class ProjectMembership(Base):
    """Persisted membership of a user in a project."""

    __tablename__ = "project_memberships"
    __table_args__ = (
        Index(
            ACTIVE_MEMBERSHIP_INDEX,
            "user_id",
            "project_id",
            unique=True,
            postgresql_where=text("left_at IS NULL"),
            sqlite_where=text("left_at IS NULL"),
        ),
        Index("ix_project_memberships_project_active", "project_id", "left_at"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=generate_uuid7)
    user_id: Mapped[UUID] = mapped_column(index=True)
    project_id: Mapped[UUID]
    role: Mapped[ProjectRole] = mapped_column(
        SAEnum(ProjectRole, name="project_role", native_enum=False, length=20)
    )
    joined_at: Mapped[datetime] = mapped_column(default=utc_now)
    left_at: Mapped[datetime | None]

    @classmethod
    def from_domain(cls, membership: Membership) -> ProjectMembership:
        return cls(
            id=membership.id,
            user_id=membership.user_id,
            project_id=membership.project_id,
            role=membership.role,
            joined_at=membership.joined_at,
            left_at=membership.left_at,
        )

    def to_domain(self) -> Membership:
        return Membership(
            id=self.id,
            user_id=self.user_id,
            project_id=self.project_id,
            role=self.role,
            joined_at=_as_utc(self.joined_at),
            left_at=_as_utc(self.left_at),
        )


__all__ = ["ACTIVE_MEMBERSHIP_INDEX", "ProjectMembership"]
