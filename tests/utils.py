"""Builders shared by the access core tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import count
from uuid import UUID, uuid4

from projecthub.core.auth.principal import Principal
from projecthub.core.rbac.types import GlobalRole, Membership, ProjectContext, ProjectRole

_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


def make_principal(
    role: GlobalRole = GlobalRole.CONTRIBUTOR,
    *,
    active: bool = True,
    user_id: UUID | None = None,
) -> Principal:
    return Principal(user_id=user_id or uuid4(), global_role=role, is_active=active)


def make_membership(
    user_id: UUID,
    project_id: UUID,
    role: ProjectRole = ProjectRole.MEMBER,
    *,
    left: bool = False,
) -> Membership:
    return Membership(
        id=uuid4(),
        user_id=user_id,
        project_id=project_id,
        role=role,
        joined_at=_EPOCH,
        left_at=_EPOCH + timedelta(days=1) if left else None,
    )


def project_for(
    principal: Principal,
    role: ProjectRole | None,
    *,
    project_id: UUID | None = None,
    public: bool = False,
) -> ProjectContext:
    """Project context where ``principal`` holds ``role`` (``None`` for a non-member)."""

    project_id = project_id or uuid4()
    membership = (
        make_membership(principal.user_id, project_id, role) if role is not None else None
    )
    return ProjectContext(project_id=project_id, is_public=public, membership=membership)


class TickingClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime = _EPOCH) -> None:
        self._start = start
        self._ticks = count()

    def __call__(self) -> datetime:
        return self._start + timedelta(seconds=next(self._ticks))
