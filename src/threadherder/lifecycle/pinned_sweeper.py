"""
Keeps pinned forum threads read-only.

Pinned threads serve as announcements, so any comment posted in them is
deleted. The starter message and system messages are left alone.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

import discord

from threadherder.datatypes.lifecycle_datatypes import SweepReport
from threadherder.util.discord_utils import is_comment, is_pinned
from threadherder.util.logger import get_logger

logger = get_logger("pinned_sweeper")


class PinnedThreadSweeper:
    """Deletes comments from pinned threads."""

    async def sweep_thread(self, thread: discord.Thread, report: SweepReport | None = None) -> int:
        """
        Delete every comment in ``thread``.

        Args:
            thread: A pinned thread.
            report: Optional report that records deletions and failures.

        Returns:
            int: Number of messages deleted.
        """
        deleted = 0
        try:
            messages = [message async for message in thread.history(limit=None)]
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[PINNED SWEEPER] Unable to list messages in thread %s: %s", thread.id, exc)
            if report is not None:
                report.record_error(thread.id)
            return 0

        for message in messages:
            if not is_comment(message, thread.id):
                continue

            try:
                await message.delete()
            except asyncio.CancelledError:
                raise
            except discord.NotFound:
                logger.debug("[PINNED SWEEPER] Message %s in thread %s already gone", message.id, thread.id)
            except Exception as exc:
                logger.warning(
                    "[PINNED SWEEPER] Failed to delete message %s in thread %s: %s",
                    message.id,
                    thread.id,
                    exc,
                )
                if report is not None:
                    report.record_error(thread.id)
            else:
                deleted += 1

        if deleted:
            logger.info("[PINNED SWEEPER] Deleted %d comment(s) from pinned thread %s", deleted, thread.id)
        if report is not None:
            report.messages_deleted += deleted
        return deleted

    async def sweep(self, threads: Iterable[discord.Thread], report: SweepReport | None = None) -> int:
        """Sweep every pinned thread in ``threads`` and return the total deletions."""
        total = 0
        for thread in threads:
            if not is_pinned(thread):
                continue
            total += await self.sweep_thread(thread, report)
        return total
