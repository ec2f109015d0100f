"""
Pytest configuration and fixtures for Thread Herder tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

# Add src directory to path so imports work without an editable install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from threadherder.datatypes.lifecycle_datatypes import LifecycleThresholds  # noqa: E402

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
FORUM_ID = 500
SOLVED_TAG_ID = 11
STALE_TAG_ID = 22
OTHER_TAG_ID = 33


def make_tag(tag_id: int, name: str) -> SimpleNamespace:
    return SimpleNamespace(id=tag_id, name=name)


def make_forum(forum_id: int = FORUM_ID, tags=None) -> SimpleNamespace:
    if tags is None:
        tags = [
            make_tag(SOLVED_TAG_ID, "solved"),
            make_tag(STALE_TAG_ID, "stale"),
            make_tag(OTHER_TAG_ID, "question"),
        ]
    return SimpleNamespace(id=forum_id, type=discord.ChannelType.forum, available_tags=tags)


def make_thread(
    thread_id: int,
    *,
    idle: timedelta = timedelta(0),
    tags=(),
    pinned: bool = False,
    parent_id: int | None = FORUM_ID,
    owner_id: int = 1000,
    messages=None,
) -> SimpleNamespace:
    """Fake py-cord thread whose last message was posted ``idle`` before NOW."""
    last_message_id = discord.utils.time_snowflake(NOW - idle)
    thread = SimpleNamespace(
        id=thread_id,
        parent_id=parent_id,
        name=f"thread-{thread_id}",
        last_message_id=last_message_id,
        flags=SimpleNamespace(pinned=pinned),
        archived=False,
        applied_tags=[SimpleNamespace(id=tag_id) for tag_id in tags],
        owner_id=owner_id,
        edit=AsyncMock(),
    )

    async def history(limit=None):
        for message in messages or []:
            yield message

    thread.history = history
    return thread


def make_message(message_id: int, message_type=discord.MessageType.default) -> SimpleNamespace:
    return SimpleNamespace(id=message_id, type=message_type, delete=AsyncMock())


@pytest.fixture()
def thresholds() -> LifecycleThresholds:
    return LifecycleThresholds(
        solved_timeout=timedelta(hours=1),
        stale_timeout=timedelta(hours=1),
        stale_grace_period=timedelta(hours=2),
    )
