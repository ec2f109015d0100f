"""
discord_utils.py
================

Low-level Discord helpers for Thread Herder.

Stateless conversions between py-cord objects and the plain lifecycle
datatypes, plus the small checks shared by the sweep and the slash commands.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

import discord

from threadherder.datatypes.lifecycle_datatypes import ThreadSnapshot

# Message kinds that count as user comments in a thread
COMMENT_MESSAGE_TYPES = frozenset({discord.MessageType.default, discord.MessageType.reply})


def last_activity(thread: discord.Thread) -> datetime:
    """
    Return the time of the most recent message in a thread.

    Discord snowflakes encode their creation time, so the last message id is
    enough. A thread without messages falls back to its own id.

    Args:
        thread (discord.Thread): Thread to inspect.

    Returns:
        datetime: Aware UTC datetime of the latest activity.
    """
    snowflake = getattr(thread, "last_message_id", None) or thread.id
    return discord.utils.snowflake_time(snowflake)


def applied_tag_ids(thread: discord.Thread) -> tuple[int, ...]:
    """Return the ids of the tags applied to ``thread``, in Discord's order."""
    # applied_tags drops ids missing from the cached parent forum; keep them all.
    raw_ids = getattr(thread, "_applied_tags", None)
    if raw_ids is not None:
        return tuple(int(tag_id) for tag_id in raw_ids)
    return tuple(tag.id for tag in getattr(thread, "applied_tags", None) or [])


def is_pinned(thread: discord.Thread) -> bool:
    flags = getattr(thread, "flags", None)
    return bool(getattr(flags, "pinned", False))


def snapshot_thread(thread: discord.Thread) -> ThreadSnapshot:
    """
    Freeze the fields of a py-cord thread the lifecycle rules look at.

    Args:
        thread (discord.Thread): Active thread returned by the API.

    Returns:
        ThreadSnapshot: Immutable copy of the thread state.
    """
    return ThreadSnapshot(
        id=thread.id,
        parent_id=thread.parent_id,
        name=thread.name,
        last_activity=last_activity(thread),
        pinned=is_pinned(thread),
        archived=bool(getattr(thread, "archived", False)),
        applied_tags=applied_tag_ids(thread),
        owner_id=getattr(thread, "owner_id", None),
    )


def is_forum_channel(channel: object) -> bool:
    """Return True if ``channel`` is a forum channel."""
    return getattr(channel, "type", None) == discord.ChannelType.forum


def is_comment(message: discord.Message, thread_id: int) -> bool:
    """
    Return True if ``message`` is a user comment in the thread ``thread_id``.

    The thread starter message shares the thread's id and is never a comment.
    System messages (pins, renames, joins) are not comments either.
    """
    if message.id == thread_id:
        return False
    return message.type in COMMENT_MESSAGE_TYPES


def has_solve_permission(
    user_id: int,
    role_ids: Iterable[int],
    owner_id: int | None,
    *,
    bypass_user_ids: Iterable[int],
    moderator_role_ids: Iterable[int],
) -> bool:
    """
    Decide whether a member may mark a thread as solved.

    Allowed when the member is a bypass user, owns the thread, or holds any
    moderator role.
    """
    if user_id in set(bypass_user_ids):
        return True

    if owner_id is not None and owner_id == user_id:
        return True

    return not set(moderator_role_ids).isdisjoint(role_ids)
