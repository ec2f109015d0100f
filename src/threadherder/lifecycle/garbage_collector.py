"""
One full garbage collection sweep over every guild.

For each guild the sweep lists the active threads, resolves the tags of every
forum involved once, then runs the solved pass, the stale-mark pass, the
stale-archive pass and finally the pinned-thread sweep. Everything is awaited
sequentially to stay well inside Discord's rate limits.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable

import discord

from threadherder.datatypes.lifecycle_datatypes import LifecycleAction, SweepReport, ThreadSnapshot
from threadherder.lifecycle.lifecycle_executor import LifecycleExecutor
from threadherder.lifecycle.pinned_sweeper import PinnedThreadSweeper
from threadherder.lifecycle.tag_resolver import TagCache
from threadherder.lifecycle.thread_classifier import ThreadClassifier
from threadherder.util.discord_utils import snapshot_thread
from threadherder.util.logger import get_logger

logger = get_logger("garbage_collector")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ThreadGarbageCollector:
    """
    Runs lifecycle sweeps for all guilds the bot is in.

    Args:
        bot: Connected py-cord bot.
        classifier: Lifecycle rules with thresholds and tag names.
        executor: Applies decisions. Built from ``classifier`` when omitted.
        sweeper: Pinned-thread sweeper. A default one is created when omitted.
        clock: Returns the current aware UTC time.
    """

    def __init__(
        self,
        bot: discord.Bot,
        classifier: ThreadClassifier,
        *,
        executor: LifecycleExecutor | None = None,
        sweeper: PinnedThreadSweeper | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.bot = bot
        self.classifier = classifier
        self.executor = executor or LifecycleExecutor(classifier)
        self.sweeper = sweeper or PinnedThreadSweeper()
        self.clock = clock

    async def collect_garbage(self) -> list[SweepReport]:
        """Sweep every guild once and return one report per guild swept."""
        logger.info("[GARBAGE COLLECTOR] Garbage collecting forum threads")
        try:
            guilds = list(self.bot.guilds)
        except Exception as exc:
            logger.error("[GARBAGE COLLECTOR] Error fetching guilds: %s", exc)
            return []

        reports = []
        for guild in guilds:
            reports.append(await self.clean_guild(guild))
        return reports

    async def clean_guild(self, guild: discord.Guild) -> SweepReport:
        """Run every lifecycle pass over the active threads of ``guild``."""
        report = SweepReport(guild_id=guild.id)
        logger.info("[GARBAGE COLLECTOR] Cleaning guild %s (%s)", guild.id, guild.name)

        try:
            threads = list(await guild.active_threads())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[GARBAGE COLLECTOR] Error getting active threads for guild %s: %s", guild.id, exc)
            report.errors += 1
            return report

        logger.debug("[GARBAGE COLLECTOR] %d active threads in guild %s", len(threads), guild.id)
        report.threads_checked = len(threads)
        if not threads:
            return report

        snapshots: dict[int, ThreadSnapshot] = {thread.id: snapshot_thread(thread) for thread in threads}
        tag_cache = TagCache(self.bot.fetch_channel)
        await tag_cache.fill(dict.fromkeys(snapshot.parent_id for snapshot in snapshots.values()))

        if not any(tag_cache.peek(snapshot.parent_id) for snapshot in snapshots.values()):
            logger.warning(
                "[GARBAGE COLLECTOR] No forum tags resolved for guild %s despite %d threads; skipping lifecycle passes",
                guild.id,
                len(threads),
            )
        else:
            now = self.clock()
            archived: set[int] = set()
            await self._run_pass(threads, snapshots, tag_cache, archived, report, self.classifier.classify_solved, now)
            await self._run_pass(threads, snapshots, tag_cache, archived, report, self.classifier.classify_stale_mark, now)
            await self._run_pass(threads, snapshots, tag_cache, archived, report, self.classifier.classify_stale_archive, now)
            threads = [thread for thread in threads if thread.id not in archived]

        await self.sweeper.sweep(threads, report)

        logger.info("[GARBAGE COLLECTOR] Guild %s done: %s", guild.id, report.summary())
        return report

    async def _run_pass(
        self,
        threads: list[discord.Thread],
        snapshots: dict[int, ThreadSnapshot],
        tag_cache: TagCache,
        archived: set[int],
        report: SweepReport,
        classify: Callable,
        now: datetime,
    ) -> None:
        for thread in threads:
            if thread.id in archived:
                continue

            snapshot = snapshots[thread.id]
            tags = tag_cache.peek(snapshot.parent_id)
            action = classify(snapshot, tags, now)
            if action is LifecycleAction.SKIP:
                continue

            updated = await self.executor.execute(thread, snapshot, action, tags, report)
            if updated is None:
                continue

            snapshots[thread.id] = updated
            if action.archives:
                archived.add(thread.id)
