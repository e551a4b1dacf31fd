"""Membership store contract and an in-process implementation."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol
from uuid import UUID

from projecthub.core.rbac.types import Membership


class MembershipStore(Protocol):
    """Persistence boundary for membership rows.

    Implementations raise :class:`~projecthub.core.auth.errors.StoreUnavailableError`
    when the backing store cannot be reached.
    """

    def unit_of_work(self) -> AbstractAsyncContextManager[None]:
        """Make the writes issued inside the block durable, or none of them."""
        ...

    async def load_active_membership(
        self, user_id: UUID, project_id: UUID
    ) -> Membership | None: ...

    async def persist_membership(self, membership: Membership) -> None: ...

    async def persist_membership_update(self, membership: Membership) -> None: ...

    async def list_active_memberships(self, project_id: UUID) -> list[Membership]: ...

    async def list_active_for_user(self, user_id: UUID) -> list[Membership]: ...

    async def list_history(self, user_id: UUID, project_id: UUID) -> list[Membership]: ...


class InMemoryMembershipStore:
    """Dictionary-backed store keyed by membership id.

    Rows are kept in insertion order so history listings come back oldest first.
    """

    def __init__(self, memberships: list[Membership] | None = None) -> None:
        self._rows: dict[UUID, Membership] = {}
        for membership in memberships or ():
            self._rows[membership.id] = membership

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[None]:
        # Writes apply immediately; lifecycle checks all run before the first write.
        yield

    async def load_active_membership(
        self, user_id: UUID, project_id: UUID
    ) -> Membership | None:
        for row in self._rows.values():
            if row.is_active and row.user_id == user_id and row.project_id == project_id:
                return row
        return None

    async def persist_membership(self, membership: Membership) -> None:
        if membership.id in self._rows:
            raise ValueError(f"Membership '{membership.id}' already persisted")
        self._rows[membership.id] = membership

    async def persist_membership_update(self, membership: Membership) -> None:
        if membership.id not in self._rows:
            raise KeyError(membership.id)
        self._rows[membership.id] = membership

    async def list_active_memberships(self, project_id: UUID) -> list[Membership]:
        return [
            row for row in self._rows.values() if row.is_active and row.project_id == project_id
        ]

    async def list_active_for_user(self, user_id: UUID) -> list[Membership]:
        return [row for row in self._rows.values() if row.is_active and row.user_id == user_id]

    async def list_history(self, user_id: UUID, project_id: UUID) -> list[Membership]:
        rows = [
            row
            for row in self._rows.values()
            if row.user_id == user_id and row.project_id == project_id
        ]
        return sorted(rows, key=lambda row: row.joined_at)

    def all_rows(self) -> list[Membership]:
        """Snapshot of every stored row (tests compare table state with this)."""

        return list(self._rows.values())


__all__ = ["InMemoryMembershipStore", "MembershipStore"]
