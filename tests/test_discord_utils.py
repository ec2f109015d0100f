from datetime import timedelta
from types import SimpleNamespace

import discord

from conftest import NOW, OTHER_TAG_ID, STALE_TAG_ID, make_message, make_thread
from threadherder.util.discord_utils import (
    applied_tag_ids,
    has_solve_permission,
    is_comment,
    is_forum_channel,
    last_activity,
    snapshot_thread,
)


def test_snapshot_thread_copies_lifecycle_fields() -> None:
    thread = make_thread(1, idle=timedelta(hours=3), tags=[OTHER_TAG_ID, STALE_TAG_ID], pinned=True, owner_id=7)

    snapshot = snapshot_thread(thread)

    assert snapshot.id == 1
    assert snapshot.parent_id == thread.parent_id
    assert snapshot.pinned is True
    assert snapshot.applied_tags == (OTHER_TAG_ID, STALE_TAG_ID)
    assert snapshot.owner_id == 7
    assert snapshot.inactivity(NOW) == timedelta(hours=3)


def test_last_activity_falls_back_to_thread_id() -> None:
    created = NOW - timedelta(days=2)
    thread = SimpleNamespace(id=discord.utils.time_snowflake(created), last_message_id=None)

    assert last_activity(thread) == created


def test_is_comment_excludes_starter_and_system_messages() -> None:
    assert is_comment(make_message(2), thread_id=1)
    assert is_comment(make_message(3, discord.MessageType.reply), thread_id=1)
    assert not is_comment(make_message(1), thread_id=1)
    assert not is_comment(make_message(4, discord.MessageType.channel_name_change), thread_id=1)


def test_is_forum_channel() -> None:
    assert is_forum_channel(SimpleNamespace(type=discord.ChannelType.forum))
    assert not is_forum_channel(SimpleNamespace(type=discord.ChannelType.text))
    assert not is_forum_channel(None)


def test_has_solve_permission_rules() -> None:
    options = {"bypass_user_ids": {99}, "moderator_role_ids": {5}}

    assert has_solve_permission(99, [], owner_id=1, **options)
    assert has_solve_permission(1, [], owner_id=1, **options)
    assert has_solve_permission(2, [4, 5], owner_id=1, **options)
    assert not has_solve_permission(2, [4], owner_id=1, **options)
    assert not has_solve_permission(2, [], owner_id=None, **options)


def test_applied_tag_ids_keeps_ids_unknown_to_the_cached_forum() -> None:
    thread = SimpleNamespace(_applied_tags=[OTHER_TAG_ID, STALE_TAG_ID], applied_tags=[])

    assert applied_tag_ids(thread) == (OTHER_TAG_ID, STALE_TAG_ID)
