"""
Pure decision rules for the thread lifecycle.

Each pass looks at one thread snapshot, the tag mapping of its forum and the
current time, and returns a single :class:`LifecycleAction`. Nothing here
talks to Discord, so "now" and the thresholds are always injected.
"""

from __future__ import annotations

from datetime import datetime

from threadherder.datatypes.lifecycle_datatypes import (
    LifecycleAction,
    LifecycleThresholds,
    TagMapping,
    ThreadSnapshot,
)

DEFAULT_SOLVED_TAG = "solved"
DEFAULT_STALE_TAG = "stale"


class ThreadClassifier:
    """
    Classifies threads for the solved, stale-mark and stale-archive passes.

    Args:
        thresholds: Inactivity thresholds.
        solved_tag: Name of the forum tag meaning "solved".
        stale_tag: Name of the forum tag meaning "stale".
    """

    def __init__(
        self,
        thresholds: LifecycleThresholds,
        *,
        solved_tag: str = DEFAULT_SOLVED_TAG,
        stale_tag: str = DEFAULT_STALE_TAG,
    ) -> None:
        self.thresholds = thresholds
        self.solved_tag = solved_tag
        self.stale_tag = stale_tag

    def solved_tag_id(self, tags: TagMapping) -> int | None:
        return tags.get(self.solved_tag)

    def stale_tag_id(self, tags: TagMapping) -> int | None:
        return tags.get(self.stale_tag)

    def classify_solved(self, thread: ThreadSnapshot, tags: TagMapping, now: datetime) -> LifecycleAction:
        """Archive solved threads once they have been quiet for ``solved_timeout``."""
        solved_id = self.solved_tag_id(tags)
        if solved_id is None:
            return LifecycleAction.SKIP

        if not thread.has_tag(solved_id):
            return LifecycleAction.SKIP

        if thread.inactivity(now) < self.thresholds.solved_timeout:
            return LifecycleAction.SKIP

        return LifecycleAction.ARCHIVE_SOLVED

    def classify_stale_mark(self, thread: ThreadSnapshot, tags: TagMapping, now: datetime) -> LifecycleAction:
        """Apply the stale tag to quiet threads and remove it once they are active again."""
        if thread.pinned:
            return LifecycleAction.SKIP

        stale_id = self.stale_tag_id(tags)
        if stale_id is None:
            return LifecycleAction.SKIP

        if thread.inactivity(now) < self.thresholds.stale_timeout:
            if thread.has_tag(stale_id):
                return LifecycleAction.REMOVE_STALE
            return LifecycleAction.SKIP

        if thread.has_tag(stale_id):
            return LifecycleAction.SKIP

        return LifecycleAction.APPLY_STALE

    def classify_stale_archive(self, thread: ThreadSnapshot, tags: TagMapping, now: datetime) -> LifecycleAction:
        """Archive threads quiet for longer than the stale timeout plus the grace period."""
        if thread.pinned:
            return LifecycleAction.SKIP

        if self.stale_tag_id(tags) is None:
            return LifecycleAction.SKIP

        if thread.inactivity(now) < self.thresholds.stale_archive_after:
            return LifecycleAction.SKIP

        return LifecycleAction.ARCHIVE_STALE

    def classify(self, thread: ThreadSnapshot, tags: TagMapping, now: datetime) -> list[LifecycleAction]:
        """
        Run all three passes for a single thread and return the non-skip actions.

        Archival ends the evaluation and a stale tag change is carried into the
        stale-archive pass, matching what a full sweep does.
        """
        actions: list[LifecycleAction] = []

        solved = self.classify_solved(thread, tags, now)
        if solved.archives:
            return [solved]

        mark = self.classify_stale_mark(thread, tags, now)
        if mark is not LifecycleAction.SKIP:
            actions.append(mark)
            thread = self.apply_to_snapshot(thread, mark, tags)

        archive = self.classify_stale_archive(thread, tags, now)
        if archive is not LifecycleAction.SKIP:
            actions.append(archive)

        return actions

    def apply_to_snapshot(
        self, thread: ThreadSnapshot, action: LifecycleAction, tags: TagMapping
    ) -> ThreadSnapshot:
        """Return the snapshot as it looks after ``action`` succeeded."""
        stale_id = self.stale_tag_id(tags)
        if action is LifecycleAction.APPLY_STALE and stale_id is not None:
            return thread.with_tag(stale_id)
        if action is LifecycleAction.REMOVE_STALE and stale_id is not None:
            return thread.without_tag(stale_id)
        return thread
