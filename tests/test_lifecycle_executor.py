from datetime import timedelta

import pytest

from conftest import NOW, OTHER_TAG_ID, SOLVED_TAG_ID, STALE_TAG_ID, make_thread
from threadherder.datatypes.lifecycle_datatypes import LifecycleAction, SweepReport
from threadherder.lifecycle.lifecycle_executor import LifecycleExecutor
from threadherder.lifecycle.thread_classifier import ThreadClassifier
from threadherder.util.discord_utils import snapshot_thread

TAGS = {"solved": SOLVED_TAG_ID, "stale": STALE_TAG_ID}


@pytest.fixture()
def executor(thresholds) -> LifecycleExecutor:
    return LifecycleExecutor(ThreadClassifier(thresholds))


def sent_tag_ids(thread) -> list[int]:
    return [tag.id for tag in thread.edit.await_args.kwargs["applied_tags"]]


@pytest.mark.asyncio
async def test_apply_stale_appends_tag_preserving_order(executor: LifecycleExecutor) -> None:
    thread = make_thread(1, idle=timedelta(hours=2), tags=[OTHER_TAG_ID, SOLVED_TAG_ID])
    report = SweepReport(guild_id=1)

    updated = await executor.execute(thread, snapshot_thread(thread), LifecycleAction.APPLY_STALE, TAGS, report)

    assert sent_tag_ids(thread) == [OTHER_TAG_ID, SOLVED_TAG_ID, STALE_TAG_ID]
    assert updated.applied_tags == (OTHER_TAG_ID, SOLVED_TAG_ID, STALE_TAG_ID)
    assert report.staled == 1


@pytest.mark.asyncio
async def test_remove_stale_keeps_other_tags(executor: LifecycleExecutor) -> None:
    thread = make_thread(1, tags=[STALE_TAG_ID, OTHER_TAG_ID])

    await executor.execute(thread, snapshot_thread(thread), LifecycleAction.REMOVE_STALE, TAGS)

    assert sent_tag_ids(thread) == [OTHER_TAG_ID]


@pytest.mark.asyncio
async def test_apply_stale_is_noop_when_tag_present(executor: LifecycleExecutor) -> None:
    thread = make_thread(1, tags=[STALE_TAG_ID])
    snapshot = snapshot_thread(thread)

    assert await executor.execute(thread, snapshot, LifecycleAction.APPLY_STALE, TAGS) is snapshot
    thread.edit.assert_not_awaited()


@pytest.mark.asyncio
async def test_archive_sets_archived_flag(executor: LifecycleExecutor) -> None:
    thread = make_thread(1, tags=[SOLVED_TAG_ID])
    report = SweepReport(guild_id=1)

    await executor.execute(thread, snapshot_thread(thread), LifecycleAction.ARCHIVE_SOLVED, TAGS, report)

    thread.edit.assert_awaited_once_with(archived=True)
    assert report.archived_solved == 1


@pytest.mark.asyncio
async def test_skip_makes_no_call(executor: LifecycleExecutor) -> None:
    thread = make_thread(1)

    await executor.execute(thread, snapshot_thread(thread), LifecycleAction.SKIP, TAGS)

    thread.edit.assert_not_awaited()


@pytest.mark.asyncio
async def test_failures_are_recorded_and_swallowed(executor: LifecycleExecutor) -> None:
    thread = make_thread(42)
    thread.edit.side_effect = RuntimeError("missing permissions")
    report = SweepReport(guild_id=1)

    result = await executor.execute(thread, snapshot_thread(thread), LifecycleAction.ARCHIVE_STALE, TAGS, report)

    assert result is None
    assert report.errors == 1
    assert report.failed_thread_ids == [42]
    assert report.archived_stale == 0
