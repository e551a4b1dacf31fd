"""Membership lifecycle: join, leave, rejoin, role changes, and listings."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from projecthub.common.ids import generate_uuid7
from projecthub.common.logging import log_context
from projecthub.common.time import utc_now
from projecthub.core.auth.principal import Principal
from projecthub.core.rbac.gate import EnforcementGate
from projecthub.core.rbac.types import Capability, Membership, ProjectContext, ProjectRole

from .exceptions import (
    AlreadyMemberError,
    LastLeadViolationError,
    MembershipForbiddenError,
    NotAMemberError,
)
from .locks import KeyedLocks
from .store import MembershipStore

logger = logging.getLogger(__name__)


class MembershipLifecycleManager:
    """The only component allowed to mutate membership state.

    Every mutation runs under a per-``(user_id, project_id)`` lock; mutations
    that can change who leads a project also hold the project lock, which is
    always taken first. The store's unit of work commits before the locks are
    released.
    """

    def __init__(
        self,
        *,
        store: MembershipStore,
        gate: EnforcementGate,
        locks: KeyedLocks,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], UUID] = generate_uuid7,
    ) -> None:
        self._store = store
        self._gate = gate
        self._locks = locks
        self._clock = clock
        self._new_id = id_factory

    # ------------------------------------------------------------------
    # Self-service
    # ------------------------------------------------------------------
    async def join(
        self,
        user_id: UUID,
        project_id: UUID,
        role: ProjectRole = ProjectRole.MEMBER,
    ) -> Membership:
        """Create a new active membership. Rejoining after ``leave`` adds a new row."""

        async with self._project_guard(user_id, project_id):
            return await self._join_locked(user_id, project_id, role)

    async def leave(self, user_id: UUID, project_id: UUID) -> Membership:
        """Close the active membership by stamping ``left_at``."""

        async with self._project_guard(user_id, project_id):
            return await self._leave_locked(user_id, project_id)

    # ------------------------------------------------------------------
    # Lead-driven management
    # ------------------------------------------------------------------
    async def change_role(
        self,
        user_id: UUID,
        project_id: UUID,
        new_role: ProjectRole,
        acting_principal: Principal,
    ) -> Membership:
        # Anything but a promotion to LEAD may demote a lead.
        guard = self._member_guard if new_role is ProjectRole.LEAD else self._project_guard
        async with guard(user_id, project_id):
            current = await self._store.load_active_membership(user_id, project_id)
            if current is None:
                self._log_rejected("change_role", "not_a_member", user_id, project_id)
                raise NotAMemberError(user_id=user_id, project_id=project_id)

            await self._ensure_can_manage(acting_principal, user_id, project_id)

            if current.role is new_role:
                logger.debug(
                    "membership.change_role.noop",
                    extra=log_context(user_id=user_id, project_id=project_id, role=new_role),
                )
                return current

            if current.role is ProjectRole.LEAD:
                await self._ensure_other_lead(current, operation="change_role")
            return await self._apply_role(current, new_role, acting_principal)

    async def add_member(
        self,
        user_id: UUID,
        project_id: UUID,
        role: ProjectRole,
        acting_principal: Principal,
    ) -> Membership:
        await self._ensure_can_manage(acting_principal, user_id, project_id)
        async with self._project_guard(user_id, project_id):
            return await self._join_locked(
                user_id, project_id, role, actor_id=acting_principal.user_id
            )

    async def remove_member(
        self,
        user_id: UUID,
        project_id: UUID,
        acting_principal: Principal,
    ) -> Membership:
        async with self._project_guard(user_id, project_id):
            current = await self._store.load_active_membership(user_id, project_id)
            if current is None:
                self._log_rejected("remove_member", "not_a_member", user_id, project_id)
                raise NotAMemberError(user_id=user_id, project_id=project_id)
            await self._ensure_can_manage(acting_principal, user_id, project_id)
            return await self._leave_locked(
                user_id, project_id, actor_id=acting_principal.user_id
            )

    async def register_creator(self, creator: Principal, project_id: UUID) -> Membership:
        """Make the creator of a new project its first ``LEAD``."""

        decision = self._gate.authorize(creator, Capability.CREATE_PROJECT)
        if not decision.allowed:
            self._log_rejected(
                "register_creator",
                "forbidden",
                creator.user_id,
                project_id,
                reason=decision.reason,
            )
            raise MembershipForbiddenError(
                actor_id=creator.user_id,
                user_id=creator.user_id,
                project_id=project_id,
                capability=Capability.CREATE_PROJECT,
            )
        return await self.join(creator.user_id, project_id, ProjectRole.LEAD)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    async def list_members(self, project_id: UUID) -> list[Membership]:
        return await self._store.list_active_memberships(project_id)

    async def list_projects(self, user_id: UUID) -> list[Membership]:
        return await self._store.list_active_for_user(user_id)

    async def history(self, user_id: UUID, project_id: UUID) -> list[Membership]:
        """Every membership row for the pair, oldest first."""

        return await self._store.list_history(user_id, project_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @asynccontextmanager
    async def _member_guard(self, user_id: UUID, project_id: UUID) -> AsyncIterator[None]:
        async with self._locks.hold(("member", user_id, project_id)):
            async with self._store.unit_of_work():
                yield

    @asynccontextmanager
    async def _project_guard(self, user_id: UUID, project_id: UUID) -> AsyncIterator[None]:
        async with self._locks.hold(("project", project_id)):
            async with self._member_guard(user_id, project_id):
                yield

    async def _join_locked(
        self,
        user_id: UUID,
        project_id: UUID,
        role: ProjectRole,
        *,
        actor_id: UUID | None = None,
    ) -> Membership:
        existing = await self._store.load_active_membership(user_id, project_id)
        if existing is not None:
            self._log_rejected("join", "already_member", user_id, project_id)
            raise AlreadyMemberError(user_id=user_id, project_id=project_id)

        membership = Membership(
            id=self._new_id(),
            user_id=user_id,
            project_id=project_id,
            role=role,
            joined_at=self._clock(),
        )
        await self._store.persist_membership(membership)
        logger.info(
            "membership.join.success",
            extra=log_context(
                user_id=user_id,
                project_id=project_id,
                actor_id=actor_id,
                role=role,
                membership_id=str(membership.id),
            ),
        )
        return membership

    async def _leave_locked(
        self,
        user_id: UUID,
        project_id: UUID,
        *,
        actor_id: UUID | None = None,
    ) -> Membership:
        current = await self._store.load_active_membership(user_id, project_id)
        if current is None:
            self._log_rejected("leave", "not_a_member", user_id, project_id)
            raise NotAMemberError(user_id=user_id, project_id=project_id)

        if current.role is ProjectRole.LEAD:
            active = await self._store.list_active_memberships(project_id)
            if any(member.id != current.id for member in active):
                await self._ensure_other_lead(current, operation="leave", active=active)

        closed = replace(current, left_at=self._clock())
        await self._store.persist_membership_update(closed)
        logger.info(
            "membership.leave.success",
            extra=log_context(
                user_id=user_id,
                project_id=project_id,
                actor_id=actor_id,
                membership_id=str(closed.id),
            ),
        )
        return closed

    async def _apply_role(
        self,
        current: Membership,
        new_role: ProjectRole,
        actor: Principal,
    ) -> Membership:
        updated = replace(current, role=new_role)
        await self._store.persist_membership_update(updated)
        logger.info(
            "membership.change_role.success",
            extra=log_context(
                user_id=current.user_id,
                project_id=current.project_id,
                actor_id=actor.user_id,
                previous_role=current.role,
                role=new_role,
            ),
        )
        return updated

    async def _ensure_other_lead(
        self,
        membership: Membership,
        *,
        operation: str,
        active: list[Membership] | None = None,
    ) -> None:
        if active is None:
            active = await self._store.list_active_memberships(membership.project_id)
        if any(
            other.role is ProjectRole.LEAD and other.id != membership.id for other in active
        ):
            return
        logger.warning(
            f"membership.{operation}.last_lead",
            extra=log_context(user_id=membership.user_id, project_id=membership.project_id),
        )
        raise LastLeadViolationError(
            user_id=membership.user_id, project_id=membership.project_id
        )

    async def _ensure_can_manage(
        self,
        actor: Principal,
        user_id: UUID,
        project_id: UUID,
    ) -> None:
        actor_membership = await self._store.load_active_membership(actor.user_id, project_id)
        context = ProjectContext(project_id=project_id, membership=actor_membership)
        decision = self._gate.authorize(actor, Capability.MANAGE_MEMBERS, context)
        if decision.allowed:
            return
        logger.info(
            "membership.manage.forbidden",
            extra=log_context(
                user_id=user_id,
                project_id=project_id,
                actor_id=actor.user_id,
                reason=decision.reason,
            ),
        )
        raise MembershipForbiddenError(
            actor_id=actor.user_id, user_id=user_id, project_id=project_id
        )

    def _log_rejected(
        self,
        operation: str,
        outcome: str,
        user_id: UUID,
        project_id: UUID,
        **extra: object,
    ) -> None:
        logger.info(
            f"membership.{operation}.{outcome}",
            extra=log_context(user_id=user_id, project_id=project_id, **extra),
        )


__all__ = ["MembershipLifecycleManager"]
