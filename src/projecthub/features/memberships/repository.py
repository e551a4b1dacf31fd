"""SQLAlchemy-backed membership store."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.common.logging import log_context
from projecthub.core.auth.errors import StoreUnavailableError
from projecthub.core.models import ACTIVE_MEMBERSHIP_INDEX, ProjectMembership
from projecthub.core.rbac.types import Membership

from .exceptions import AlreadyMemberError

logger = logging.getLogger(__name__)

# SQLite reports the indexed columns rather than the index name.
_ACTIVE_MEMBERSHIP_COLUMNS = "project_memberships.user_id, project_memberships.project_id"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError:
        raise
    except (OperationalError, DBAPIError) as exc:
        logger.error(
            "membership.store.unavailable",
            extra=log_context(operation=operation, error=type(exc).__name__),
        )
        raise StoreUnavailableError(f"Membership store unavailable during {operation}") from exc


def _is_active_membership_clash(exc: IntegrityError) -> bool:
    diag = getattr(exc.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint is not None:
        return constraint == ACTIVE_MEMBERSHIP_INDEX
    message = str(exc.orig)
    return ACTIVE_MEMBERSHIP_INDEX in message or _ACTIVE_MEMBERSHIP_COLUMNS in message


class SqlMembershipStore:
    """Persist memberships through an ``AsyncSession``.

    Individual writes only flush, so constraint violations surface inside the
    lifecycle call that caused them. :meth:`unit_of_work` is the commit
    boundary; the lifecycle manager enters it while still holding its locks,
    so the next lock holder reads committed state.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def load_active_membership(
        self, user_id: UUID, project_id: UUID
    ) -> Membership | None:
        row = await self._get_active_row(user_id, project_id)
        return row.to_domain() if row is not None else None

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[None]:
        try:
            yield
        except Exception:
            if self._session.in_transaction():
                await self._session.rollback()
            raise
        with _store_errors("commit"):
            await self._session.commit()

    async def persist_membership(self, membership: Membership) -> None:
        with _store_errors("persist_membership"):
            try:
                # Only the savepoint is discarded on a clash.
                async with self._session.begin_nested():
                    self._session.add(ProjectMembership.from_domain(membership))
            except IntegrityError as exc:
                if not _is_active_membership_clash(exc):
                    raise
                raise AlreadyMemberError(
                    user_id=membership.user_id,
                    project_id=membership.project_id,
                ) from exc

    async def persist_membership_update(self, membership: Membership) -> None:
        with _store_errors("persist_membership_update"):
            row = await self._session.get(ProjectMembership, membership.id)
            if row is None:
                raise KeyError(membership.id)
            row.role = membership.role
            row.left_at = membership.left_at
            await self._session.flush()

    async def list_active_memberships(self, project_id: UUID) -> list[Membership]:
        stmt = (
            select(ProjectMembership)
            .where(
                ProjectMembership.project_id == project_id,
                ProjectMembership.left_at.is_(None),
            )
            .order_by(ProjectMembership.joined_at)
        )
        return await self._fetch(stmt, "list_active_memberships")

    async def list_active_for_user(self, user_id: UUID) -> list[Membership]:
        stmt = (
            select(ProjectMembership)
            .where(
                ProjectMembership.user_id == user_id,
                ProjectMembership.left_at.is_(None),
            )
            .order_by(ProjectMembership.joined_at)
        )
        return await self._fetch(stmt, "list_active_for_user")

    async def list_history(self, user_id: UUID, project_id: UUID) -> list[Membership]:
        stmt = (
            select(ProjectMembership)
            .where(
                ProjectMembership.user_id == user_id,
                ProjectMembership.project_id == project_id,
            )
            .order_by(ProjectMembership.joined_at, ProjectMembership.id)
        )
        return await self._fetch(stmt, "list_history")

    async def _get_active_row(
        self, user_id: UUID, project_id: UUID
    ) -> ProjectMembership | None:
        stmt = (
            select(ProjectMembership)
            .where(
                ProjectMembership.user_id == user_id,
                ProjectMembership.project_id == project_id,
                ProjectMembership.left_at.is_(None),
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        with _store_errors("load_active_membership"):
            result = await self._session.execute(stmt)
            return result.scalar_one_or_none()

    async def _fetch(
        self, stmt: Select[tuple[ProjectMembership]], operation: str
    ) -> list[Membership]:
        with _store_errors(operation):
            result = await self._session.execute(
                stmt.execution_options(populate_existing=True)
            )
            return [row.to_domain() for row in result.scalars().all()]


__all__ = ["SqlMembershipStore"]
