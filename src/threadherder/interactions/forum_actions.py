"""
User-invoked forum actions: ``mark-solved`` and ``prompt-done``.

Both actions validate that they run inside a forum post whose forum has a
"solved" tag that is not applied yet. ``mark-solved`` additionally checks the
invoker's permission and applies the tag; ``prompt-done`` only answers with
instructions and a button that triggers ``mark-solved``.

Validation failures are normal user errors: they are answered ephemerally and
not logged as failures.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

import discord

from threadherder.datatypes.interaction_datatypes import (
    InteractionKind,
    InteractionReply,
    InteractionRequest,
)
from threadherder.interactions.dispatcher import InteractionDispatcher
from threadherder.lifecycle.tag_resolver import find_tag
from threadherder.util.discord_utils import applied_tag_ids, has_solve_permission, is_forum_channel
from threadherder.util.logger import get_logger

logger = get_logger("forum_actions")

SOLVED_COMMAND = "solved"
DONE_COMMAND = "done"
MARK_SOLVED_BUTTON_ID = "solved"

FORUM_ONLY_MESSAGE = "this command only works in forum posts"
PERMISSION_DENIED_MESSAGE = "permission denied"
NO_SOLVED_TAG_MESSAGE = "no solved tag found to apply"
ALREADY_SOLVED_MESSAGE = "post already marked as solved"
MARKED_SOLVED_MESSAGE = "Thread marked as solved"
PROMPT_DONE_MESSAGE = (
    "It looks like this question has been answered! "
    "If your problem is solved, press the button below to mark this post as solved. "
    "Solved posts are closed automatically after a period of inactivity."
)


@dataclass
class ForumPost:
    """A validated forum thread together with its parent forum."""

    thread: discord.Thread
    forum: discord.ForumChannel
    applied_tags: tuple[int, ...]


class ForumActions:
    """
    Handlers for the solved/done interactions.

    Args:
        fetch_channel: Coroutine function fetching a channel by id from the API.
        solved_tag_name: Name of the forum tag meaning "solved".
        bypass_user_ids: Users allowed to mark any post as solved.
        moderator_role_ids: Roles allowed to mark any post as solved.
        view_factory: Builds the button view attached to the done prompt.
    """

    def __init__(
        self,
        fetch_channel: Callable[[int], Awaitable[object]],
        *,
        solved_tag_name: str = "solved",
        bypass_user_ids: Iterable[int] = (),
        moderator_role_ids: Iterable[int] = (),
        view_factory: Callable[[], object] | None = None,
    ) -> None:
        self._fetch_channel = fetch_channel
        self.solved_tag_name = solved_tag_name
        self.bypass_user_ids = frozenset(bypass_user_ids)
        self.moderator_role_ids = frozenset(moderator_role_ids)
        self.view_factory = view_factory

    def register(self, dispatcher: InteractionDispatcher) -> None:
        """Wire the handlers into ``dispatcher``."""
        dispatcher.register(InteractionKind.COMMAND, SOLVED_COMMAND, self.mark_solved)
        dispatcher.register(InteractionKind.BUTTON, MARK_SOLVED_BUTTON_ID, self.mark_solved)
        dispatcher.register(InteractionKind.COMMAND, DONE_COMMAND, self.prompt_done)

    async def _load_forum_post(self, request: InteractionRequest) -> ForumPost | InteractionReply:
        """Fetch the invoking thread and its forum, or return the error reply to send."""
        if request.channel_id is None:
            return InteractionReply.error(FORUM_ONLY_MESSAGE)

        try:
            channel = await self._fetch_channel(request.channel_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return InteractionReply.error(f"can't read channel: {exc}")

        parent_id = getattr(channel, "parent_id", None)
        if not parent_id:
            return InteractionReply.error(FORUM_ONLY_MESSAGE)

        try:
            parent = await self._fetch_channel(parent_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return InteractionReply.error(f"can't read parent channel: {exc}")

        if not is_forum_channel(parent):
            return InteractionReply.error(FORUM_ONLY_MESSAGE)

        return ForumPost(
            thread=channel,
            forum=parent,
            applied_tags=applied_tag_ids(channel),
        )

    def is_authorized(self, request: InteractionRequest, thread: discord.Thread) -> bool:
        return has_solve_permission(
            request.user_id,
            request.role_ids,
            getattr(thread, "owner_id", None),
            bypass_user_ids=self.bypass_user_ids,
            moderator_role_ids=self.moderator_role_ids,
        )

    async def mark_solved(self, request: InteractionRequest) -> InteractionReply:
        """Apply the solved tag to the invoking forum post."""
        post = await self._load_forum_post(request)
        if isinstance(post, InteractionReply):
            return post

        if not self.is_authorized(request, post.thread):
            return InteractionReply.error(PERMISSION_DENIED_MESSAGE)

        solved_tag = find_tag(post.forum, self.solved_tag_name)
        if solved_tag is None:
            return InteractionReply.error(NO_SOLVED_TAG_MESSAGE)

        if solved_tag.id in post.applied_tags:
            return InteractionReply.error(ALREADY_SOLVED_MESSAGE)

        new_tags = post.applied_tags + (solved_tag.id,)
        try:
            await post.thread.edit(applied_tags=[discord.Object(id=tag_id) for tag_id in new_tags])
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[FORUM ACTIONS] Failed to apply solved tag to thread %s: %s", request.channel_id, exc)
            return InteractionReply.error(f"error applying tag: {exc}")

        logger.info(
            "[FORUM ACTIONS] Thread %s marked as solved by user %s via %s",
            request.channel_id,
            request.user_id,
            request.kind.value,
        )
        return InteractionReply(content=MARKED_SOLVED_MESSAGE)

    async def prompt_done(self, request: InteractionRequest) -> InteractionReply:
        """Ask the post owner to close the post, attaching a mark-solved button."""
        post = await self._load_forum_post(request)
        if isinstance(post, InteractionReply):
            return post

        solved_tag = find_tag(post.forum, self.solved_tag_name)
        if solved_tag is None:
            return InteractionReply.error(NO_SOLVED_TAG_MESSAGE)

        if solved_tag.id in post.applied_tags:
            return InteractionReply.error(ALREADY_SOLVED_MESSAGE)

        view = self.view_factory() if self.view_factory is not None else None
        return InteractionReply(content=PROMPT_DONE_MESSAGE, view=view)
