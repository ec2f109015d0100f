from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, call

import pytest

from conftest import FORUM_ID, NOW, OTHER_TAG_ID, SOLVED_TAG_ID, STALE_TAG_ID, make_forum, make_message, make_thread
from threadherder.lifecycle.garbage_collector import ThreadGarbageCollector
from threadherder.lifecycle.thread_classifier import ThreadClassifier


def make_guild(guild_id: int, threads=None, error: Exception | None = None) -> SimpleNamespace:
    active_threads = AsyncMock(return_value=threads or [])
    if error is not None:
        active_threads.side_effect = error
    return SimpleNamespace(id=guild_id, name=f"guild-{guild_id}", active_threads=active_threads)


def make_bot(*guilds, forum=None) -> SimpleNamespace:
    return SimpleNamespace(guilds=list(guilds), fetch_channel=AsyncMock(return_value=forum or make_forum()))


def make_collector(bot, thresholds) -> ThreadGarbageCollector:
    return ThreadGarbageCollector(bot, ThreadClassifier(thresholds), clock=lambda: NOW)


@pytest.mark.asyncio
async def test_solved_thread_is_archived_exactly_once(thresholds) -> None:
    thread = make_thread(1, idle=timedelta(hours=2), tags=[SOLVED_TAG_ID])
    bot = make_bot(make_guild(10, [thread]))

    reports = await make_collector(bot, thresholds).collect_garbage()

    thread.edit.assert_awaited_once_with(archived=True)
    assert reports[0].archived_solved == 1
    assert reports[0].staled == 0


@pytest.mark.asyncio
async def test_recent_thread_loses_stale_tag(thresholds) -> None:
    thread = make_thread(1, idle=timedelta(minutes=30), tags=[STALE_TAG_ID, OTHER_TAG_ID])
    fresh = make_thread(2, idle=timedelta(minutes=30))
    bot = make_bot(make_guild(10, [thread, fresh]))

    await make_collector(bot, thresholds).collect_garbage()

    thread.edit.assert_awaited_once()
    assert [tag.id for tag in thread.edit.await_args.kwargs["applied_tags"]] == [OTHER_TAG_ID]
    fresh.edit.assert_not_awaited()


@pytest.mark.asyncio
async def test_long_idle_thread_is_staled_then_archived(thresholds) -> None:
    thread = make_thread(1, idle=timedelta(hours=4))
    bot = make_bot(make_guild(10, [thread]))

    report = (await make_collector(bot, thresholds).collect_garbage())[0]

    assert thread.edit.await_count == 2
    first, second = thread.edit.await_args_list
    assert [tag.id for tag in first.kwargs["applied_tags"]] == [STALE_TAG_ID]
    assert second == call(archived=True)
    assert report.staled == 1
    assert report.archived_stale == 1


@pytest.mark.asyncio
async def test_second_sweep_without_changes_does_not_restale(thresholds) -> None:
    thread = make_thread(1, idle=timedelta(hours=1, minutes=30), tags=[STALE_TAG_ID])
    bot = make_bot(make_guild(10, [thread]))

    await make_collector(bot, thresholds).collect_garbage()

    thread.edit.assert_not_awaited()


@pytest.mark.asyncio
async def test_pinned_thread_is_swept_but_not_staled(thresholds) -> None:
    starter = make_message(1)
    comment = make_message(2)
    pinned = make_thread(1, idle=timedelta(days=10), pinned=True, messages=[starter, comment])
    bot = make_bot(make_guild(10, [pinned]))

    report = (await make_collector(bot, thresholds).collect_garbage())[0]

    pinned.edit.assert_not_awaited()
    comment.delete.assert_awaited_once()
    starter.delete.assert_not_awaited()
    assert report.messages_deleted == 1


@pytest.mark.asyncio
async def test_forum_tags_are_fetched_once_per_sweep(thresholds) -> None:
    threads = [make_thread(i, idle=timedelta(minutes=5)) for i in range(1, 6)]
    bot = make_bot(make_guild(10, threads))

    await make_collector(bot, thresholds).collect_garbage()

    bot.fetch_channel.assert_awaited_once_with(FORUM_ID)


@pytest.mark.asyncio
async def test_failing_guild_does_not_abort_sweep(thresholds) -> None:
    thread = make_thread(1, idle=timedelta(hours=2), tags=[SOLVED_TAG_ID])
    broken = make_guild(10, error=RuntimeError("503"))
    healthy = make_guild(20, [thread])
    bot = make_bot(broken, healthy)

    reports = await make_collector(bot, thresholds).collect_garbage()

    assert [report.guild_id for report in reports] == [10, 20]
    assert reports[0].errors == 1
    thread.edit.assert_awaited_once_with(archived=True)


@pytest.mark.asyncio
async def test_failed_mutation_continues_with_next_thread(thresholds) -> None:
    broken = make_thread(1, idle=timedelta(hours=2), tags=[SOLVED_TAG_ID])
    broken.edit.side_effect = RuntimeError("forbidden")
    healthy = make_thread(2, idle=timedelta(hours=2), tags=[SOLVED_TAG_ID])
    bot = make_bot(make_guild(10, [broken, healthy]))

    report = (await make_collector(bot, thresholds).collect_garbage())[0]

    healthy.edit.assert_any_await(archived=True)
    assert report.archived_solved == 1
    assert 1 in report.failed_thread_ids


@pytest.mark.asyncio
async def test_unreachable_forum_skips_lifecycle_passes(thresholds) -> None:
    thread = make_thread(1, idle=timedelta(days=3), tags=[SOLVED_TAG_ID])
    bot = make_bot(make_guild(10, [thread]))
    bot.fetch_channel.side_effect = RuntimeError("unknown channel")

    await make_collector(bot, thresholds).collect_garbage()

    thread.edit.assert_not_awaited()
