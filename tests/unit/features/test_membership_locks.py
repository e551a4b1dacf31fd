from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from projecthub.core.auth.errors import StoreUnavailableError
from projecthub.features.memberships.locks import KeyedLocks


async def test_same_key_is_serialized() -> None:
    locks = KeyedLocks(timeout=timedelta(seconds=1))
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("key"):
            events.append(f"{name}:start")
            await asyncio.sleep(0)
            events.append(f"{name}:end")

    await asyncio.gather(worker("a"), worker("b"))

    assert events in (
        ["a:start", "a:end", "b:start", "b:end"],
        ["b:start", "b:end", "a:start", "a:end"],
    )


async def test_different_keys_run_in_parallel() -> None:
    locks = KeyedLocks(timeout=1)
    inside = asyncio.Event()

    async def holder() -> None:
        async with locks.hold("first"):
            inside.set()
            await asyncio.sleep(0.05)

    task = asyncio.create_task(holder())
    await inside.wait()
    async with locks.hold("second"):
        assert len(locks) == 2
    await task


async def test_idle_locks_are_discarded() -> None:
    locks = KeyedLocks()

    async with locks.hold(("member", 1, 2)):
        assert len(locks) == 1

    assert len(locks) == 0


async def test_wait_timeout_surfaces_as_unavailable() -> None:
    locks = KeyedLocks(timeout=0.01)
    release = asyncio.Event()
    acquired = asyncio.Event()

    async def holder() -> None:
        async with locks.hold("key"):
            acquired.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await acquired.wait()
    with pytest.raises(StoreUnavailableError):
        async with locks.hold("key"):
            pass
    release.set()
    await task

    assert len(locks) == 0
