import asyncio
from unittest.mock import AsyncMock

import pytest

from threadherder.scheduler.gc_scheduler import GarbageCollectionScheduler


@pytest.mark.asyncio
async def test_first_sweep_waits_one_interval() -> None:
    sweep = AsyncMock()
    scheduler = GarbageCollectionScheduler(sweep, lambda: 60.0)

    scheduler.start()
    await asyncio.sleep(0.01)

    assert scheduler.running
    sweep.assert_not_awaited()

    await scheduler.shutdown()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_start_runs_sweep_and_shutdown_stops_it() -> None:
    sweep = AsyncMock()
    scheduler = GarbageCollectionScheduler(sweep, lambda: 0.1)

    scheduler.start()
    await asyncio.sleep(0.15)

    assert scheduler.running
    sweep.assert_awaited_once()

    await scheduler.shutdown()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_start_is_idempotent() -> None:
    sweep = AsyncMock()
    get_interval = lambda: 0.1  # noqa: E731
    scheduler = GarbageCollectionScheduler(sweep, get_interval)

    scheduler.start()
    first_task = scheduler._task
    scheduler.start()
    await asyncio.sleep(0.15)

    assert scheduler._task is first_task
    sweep.assert_awaited_once()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_failing_sweep_does_not_stop_the_loop() -> None:
    sweep = AsyncMock(side_effect=RuntimeError("cannot list guilds"))
    scheduler = GarbageCollectionScheduler(sweep, lambda: 0.01)

    scheduler.start()
    await asyncio.sleep(0.1)

    assert scheduler.running
    assert sweep.await_count >= 2
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_sweeps_never_overlap() -> None:
    active = 0
    max_active = 0

    async def slow_sweep() -> None:
        nonlocal active, max_active
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.03)
        active -= 1

    scheduler = GarbageCollectionScheduler(slow_sweep, lambda: 0.01)
    scheduler.start()
    await asyncio.sleep(0.15)
    await scheduler.shutdown()

    assert max_active == 1


@pytest.mark.asyncio
async def test_shutdown_without_start_is_safe() -> None:
    scheduler = GarbageCollectionScheduler(AsyncMock(), lambda: 1.0)

    await scheduler.shutdown()

    assert not scheduler.running
