from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import replace
from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projecthub.core.auth.errors import StoreUnavailableError
from projecthub.core.rbac.gate import EnforcementGate
from projecthub.core.rbac.types import GlobalRole, Membership, ProjectRole
from projecthub.features.memberships.exceptions import AlreadyMemberError, LastLeadViolationError
from projecthub.features.memberships.locks import KeyedLocks
from projecthub.features.memberships.repository import SqlMembershipStore
from projecthub.features.memberships.service import MembershipLifecycleManager
from projecthub.infra.db import create_all, get_engine, get_sessionmaker, reset_database_state
from projecthub.settings import Settings
from tests.utils import TickingClock, make_membership, make_principal


@pytest.fixture()
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    settings = Settings(
        _env_file=None,
        database_dsn=f"sqlite+aiosqlite:///{tmp_path / 'projecthub.sqlite'}",
    )
    await create_all(get_engine(settings))
    try:
        yield get_sessionmaker(settings)
    finally:
        reset_database_state()


async def test_persist_load_and_close_membership(session_factory) -> None:
    user_id, project_id = uuid4(), uuid4()
    membership = make_membership(user_id, project_id, ProjectRole.LEAD)

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        await store.persist_membership(membership)
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        loaded = await store.load_active_membership(user_id, project_id)
        assert loaded == membership

        closed = replace(membership, role=ProjectRole.MEMBER, left_at=membership.joined_at)
        await store.persist_membership_update(closed)
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        assert await store.load_active_membership(user_id, project_id) is None
        assert await store.list_history(user_id, project_id) == [closed]
        assert await store.list_active_memberships(project_id) == []


async def test_second_active_row_is_rejected(session_factory) -> None:
    user_id, project_id = uuid4(), uuid4()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        await store.persist_membership(make_membership(user_id, project_id))
        await session.commit()

        with pytest.raises(AlreadyMemberError):
            await store.persist_membership(make_membership(user_id, project_id))

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        assert len(await store.list_history(user_id, project_id)) == 1


async def test_closed_rows_do_not_block_a_new_active_row(session_factory) -> None:
    user_id, project_id = uuid4(), uuid4()
    closed = make_membership(user_id, project_id, left=True)
    active = make_membership(user_id, project_id)

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        await store.persist_membership(closed)
        await store.persist_membership(active)
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        assert await store.load_active_membership(user_id, project_id) == active
        assert await store.list_active_for_user(user_id) == [active]


async def test_update_of_unknown_row_raises_key_error(session_factory) -> None:
    async with session_factory() as session:
        store = SqlMembershipStore(session)
        with pytest.raises(KeyError):
            await store.persist_membership_update(make_membership(uuid4(), uuid4()))


async def test_database_failures_surface_as_store_unavailable(session_factory) -> None:
    async with session_factory() as session:
        await session.execute(text("DROP TABLE project_memberships"))
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        with pytest.raises(StoreUnavailableError):
            await store.load_active_membership(uuid4(), uuid4())


async def test_lifecycle_over_sql_store(session_factory) -> None:
    lead = make_principal()
    member = uuid4()
    project_id = uuid4()
    locks = KeyedLocks(timeout=1)
    clock = TickingClock()

    async with session_factory() as session:
        manager = MembershipLifecycleManager(
            store=SqlMembershipStore(session),
            gate=EnforcementGate(),
            locks=locks,
            clock=clock,
        )
        await manager.register_creator(lead, project_id)
        await manager.add_member(member, project_id, ProjectRole.MEMBER, lead)
        await manager.leave(member, project_id)
        await manager.join(member, project_id, ProjectRole.OBSERVER)
        with pytest.raises(LastLeadViolationError):
            await manager.leave(lead.user_id, project_id)
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        history = await store.list_history(member, project_id)
        assert [row.role for row in history] == [ProjectRole.MEMBER, ProjectRole.OBSERVER]
        assert history[0].left_at is not None and history[1].left_at is None
        active = await store.list_active_memberships(project_id)
        assert [row.user_id for row in active] == [lead.user_id, member]


async def test_duplicate_join_keeps_earlier_writes_in_the_session(session_factory) -> None:
    project_id = uuid4()
    leaving = make_membership(uuid4(), project_id)
    staying = make_membership(uuid4(), project_id)

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        await store.persist_membership(leaving)
        await store.persist_membership(staying)
        await session.commit()

    closed = replace(leaving, left_at=leaving.joined_at)
    async with session_factory() as session:
        store = SqlMembershipStore(session)
        await store.persist_membership_update(closed)
        with pytest.raises(AlreadyMemberError):
            await store.persist_membership(make_membership(staying.user_id, project_id))
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        assert await store.list_history(leaving.user_id, project_id) == [closed]
        assert await store.list_active_memberships(project_id) == [staying]


async def test_other_integrity_errors_are_not_reported_as_membership_clashes(
    session_factory,
) -> None:
    membership = make_membership(uuid4(), uuid4())

    async with session_factory() as session:
        await SqlMembershipStore(session).persist_membership(membership)
        await session.commit()

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        reused_id = replace(membership, project_id=uuid4())
        with pytest.raises(IntegrityError):
            await store.persist_membership(reused_id)


async def test_concurrent_demotions_across_sessions_keep_a_lead(session_factory) -> None:
    project_manager = make_principal(GlobalRole.PROJECT_MANAGER)
    first, second, member = uuid4(), uuid4(), uuid4()
    project_id = uuid4()
    locks = KeyedLocks(timeout=5)

    async with session_factory() as session:
        store = SqlMembershipStore(session)
        for user_id, role in (
            (first, ProjectRole.LEAD),
            (second, ProjectRole.LEAD),
            (member, ProjectRole.MEMBER),
        ):
            await store.persist_membership(make_membership(user_id, project_id, role))
        await session.commit()

    async def demote(user_id):
        async with session_factory() as session:
            manager = MembershipLifecycleManager(
                store=SqlMembershipStore(session),
                gate=EnforcementGate(),
                locks=locks,
            )
            try:
                return await manager.change_role(
                    user_id, project_id, ProjectRole.MEMBER, project_manager
                )
            finally:
                # Request-level commit lands after the endpoint returns.
                await asyncio.sleep(0.05)
                await session.commit()

    results = await asyncio.gather(demote(first), demote(second), return_exceptions=True)

    assert sum(isinstance(result, Membership) for result in results) == 1
    assert sum(isinstance(result, LastLeadViolationError) for result in results) == 1
    async with session_factory() as session:
        active = await SqlMembershipStore(session).list_active_memberships(project_id)
    assert len(active) == 3
    assert sum(row.role is ProjectRole.LEAD for row in active) == 1
