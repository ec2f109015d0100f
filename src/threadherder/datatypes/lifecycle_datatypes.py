"""
Value types shared by the thread lifecycle rules.

Everything here is plain data: the classifier consumes :class:`ThreadSnapshot`
and :class:`LifecycleThresholds`, and emits :class:`LifecycleAction` values that
the executor turns into Discord API calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Mapping

# Tag name -> tag id for a single forum channel
TagMapping = Mapping[str, int]


class LifecycleAction(Enum):
    """Outcome of one classifier pass for one thread."""

    SKIP = "skip"
    APPLY_STALE = "apply_stale"
    REMOVE_STALE = "remove_stale"
    ARCHIVE_SOLVED = "archive_solved"
    ARCHIVE_STALE = "archive_stale"

    @property
    def archives(self) -> bool:
        return self in (LifecycleAction.ARCHIVE_SOLVED, LifecycleAction.ARCHIVE_STALE)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LifecycleThresholds:
    """
    Inactivity thresholds driving the lifecycle passes.

    Attributes:
        solved_timeout: Inactivity after which a solved thread is archived.
        stale_timeout: Inactivity after which the stale tag is applied.
        stale_grace_period: Extra inactivity after staling before archival.
    """

    solved_timeout: timedelta = timedelta(hours=1)
    stale_timeout: timedelta = timedelta(days=7)
    stale_grace_period: timedelta = timedelta(days=7)

    @property
    def stale_archive_after(self) -> timedelta:
        return self.stale_timeout + self.stale_grace_period


@dataclass(frozen=True)
class ThreadSnapshot:
    """
    Immutable view of a forum thread taken at the start of a sweep.

    Attributes:
        id: Thread (channel) snowflake.
        parent_id: Snowflake of the forum channel holding the thread.
        name: Thread title, used for logging only.
        pinned: Whether the thread is pinned in its forum.
        archived: Whether the thread is already archived.
        applied_tags: Applied tag ids, in the order Discord reports them.
        last_activity: Time of the most recent message (UTC).
        owner_id: Snowflake of the user who opened the thread.
    """

    id: int
    parent_id: int | None
    name: str
    last_activity: datetime
    pinned: bool = False
    archived: bool = False
    applied_tags: tuple[int, ...] = ()
    owner_id: int | None = None

    def has_tag(self, tag_id: int) -> bool:
        return tag_id in self.applied_tags

    def inactivity(self, now: datetime) -> timedelta:
        return now - self.last_activity

    def with_tag(self, tag_id: int) -> "ThreadSnapshot":
        """Return a copy with ``tag_id`` appended, unless it is already applied."""
        if tag_id in self.applied_tags:
            return self
        return replace(self, applied_tags=self.applied_tags + (tag_id,))

    def without_tag(self, tag_id: int) -> "ThreadSnapshot":
        """Return a copy with every occurrence of ``tag_id`` removed, order preserved."""
        if tag_id not in self.applied_tags:
            return self
        return replace(self, applied_tags=tuple(t for t in self.applied_tags if t != tag_id))


@dataclass
class SweepReport:
    """Counters collected while sweeping one guild."""

    guild_id: int
    threads_checked: int = 0
    archived_solved: int = 0
    archived_stale: int = 0
    staled: int = 0
    unstaled: int = 0
    messages_deleted: int = 0
    errors: int = 0
    failed_thread_ids: list[int] = field(default_factory=list)

    def record(self, action: LifecycleAction) -> None:
        if action is LifecycleAction.ARCHIVE_SOLVED:
            self.archived_solved += 1
        elif action is LifecycleAction.ARCHIVE_STALE:
            self.archived_stale += 1
        elif action is LifecycleAction.APPLY_STALE:
            self.staled += 1
        elif action is LifecycleAction.REMOVE_STALE:
            self.unstaled += 1

    def record_error(self, thread_id: int) -> None:
        self.errors += 1
        self.failed_thread_ids.append(thread_id)

    def summary(self) -> str:
        return (
            f"checked={self.threads_checked} archived_solved={self.archived_solved} "
            f"archived_stale={self.archived_stale} staled={self.staled} "
            f"unstaled={self.unstaled} deleted_messages={self.messages_deleted} "
            f"errors={self.errors}"
        )
