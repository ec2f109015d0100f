"""
Forum tag lookup by name.

Tag ids are only meaningful inside one forum, and moderators may recreate a
tag at any time, so the lifecycle rules never hardcode ids. Instead each forum
is asked for its ``available_tags`` and the "solved"/"stale" tags are found by
name.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict

import discord

from threadherder.datatypes.lifecycle_datatypes import TagMapping
from threadherder.util.discord_utils import is_forum_channel
from threadherder.util.logger import get_logger

logger = get_logger("tag_resolver")

ChannelFetcher = Callable[[int], Awaitable[object]]


def resolve_tags(forum: object) -> Dict[str, int]:
    """
    Build a ``tag name -> tag id`` mapping for a forum channel.

    If two tags share a name, the first one in the forum's catalog wins.

    Args:
        forum: Forum channel (anything exposing ``available_tags``).

    Returns:
        Dict[str, int]: Mapping from tag name to tag id.
    """
    mapping: Dict[str, int] = {}
    for tag in getattr(forum, "available_tags", None) or []:
        mapping.setdefault(tag.name, tag.id)
    return mapping


def find_tag(forum: object, name: str) -> discord.ForumTag | None:
    """Return the tag called ``name`` in ``forum``, or None."""
    for tag in getattr(forum, "available_tags", None) or []:
        if tag.name == name:
            return tag
    return None


class TagCache:
    """
    Per-sweep cache of forum tag mappings keyed by forum channel id.

    A fresh instance is created for every guild sweep and thrown away after
    it, so tag renames on Discord take effect on the next sweep and every
    thread of a forum sees the same mapping within one sweep.

    A forum whose channel cannot be fetched, or which is not a forum, maps to
    an empty dict. That result is cached too, so the fetch is attempted at
    most once per sweep.
    """

    def __init__(self, fetch_channel: ChannelFetcher) -> None:
        self._fetch_channel = fetch_channel
        self._mappings: Dict[int, Dict[str, int]] = {}

    def __contains__(self, forum_id: object) -> bool:
        return forum_id in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    async def get(self, forum_id: int | None) -> TagMapping:
        """Return the tag mapping for ``forum_id``, fetching it on first use."""
        if forum_id is None:
            return {}

        if forum_id in self._mappings:
            return self._mappings[forum_id]

        mapping: Dict[str, int] = {}
        try:
            forum = await self._fetch_channel(forum_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[TAG RESOLVER] Unable to fetch forum %s: %s", forum_id, exc)
        else:
            if is_forum_channel(forum):
                mapping = resolve_tags(forum)
                logger.debug("[TAG RESOLVER] Forum %s has tags %s", forum_id, sorted(mapping))
            else:
                logger.debug("[TAG RESOLVER] Channel %s is not a forum; no tags", forum_id)

        self._mappings[forum_id] = mapping
        return mapping

    async def fill(self, forum_ids) -> None:
        """Resolve every forum in ``forum_ids`` that is not cached yet."""
        for forum_id in forum_ids:
            await self.get(forum_id)

    def peek(self, forum_id: int | None) -> TagMapping:
        """Return an already resolved mapping without fetching (empty if unknown)."""
        return self._mappings.get(forum_id, {}) if forum_id is not None else {}
