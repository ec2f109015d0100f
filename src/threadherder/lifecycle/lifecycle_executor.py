"""
Applies lifecycle decisions to Discord threads.

Every decision becomes exactly one ``Thread.edit`` call. Failures are logged
with the thread id and swallowed: the next sweep classifies the thread again,
which is the only retry mechanism.
"""

from __future__ import annotations

import asyncio

import discord

from threadherder.datatypes.lifecycle_datatypes import (
    LifecycleAction,
    SweepReport,
    TagMapping,
    ThreadSnapshot,
)
from threadherder.lifecycle.thread_classifier import ThreadClassifier
from threadherder.util.logger import get_logger

logger = get_logger("lifecycle_executor")


class LifecycleExecutor:
    """
    Executes classifier decisions against live threads.

    Args:
        classifier: Classifier whose tag names define which tag a stale
            decision adds or removes.
    """

    def __init__(self, classifier: ThreadClassifier) -> None:
        self.classifier = classifier

    async def execute(
        self,
        thread: discord.Thread,
        snapshot: ThreadSnapshot,
        action: LifecycleAction,
        tags: TagMapping,
        report: SweepReport | None = None,
    ) -> ThreadSnapshot | None:
        """
        Perform the mutation for ``action`` on ``thread``.

        Args:
            thread: Live thread object used for the API call.
            snapshot: Current view of the thread state.
            action: Decision from the classifier.
            tags: Tag mapping of the thread's forum.
            report: Optional report that records the outcome.

        Returns:
            ThreadSnapshot | None: The snapshot after the change, or None when
            the call failed. SKIP returns the snapshot unchanged.
        """
        if action is LifecycleAction.SKIP:
            return snapshot

        try:
            if action.archives:
                logger.info("[LIFECYCLE] Archiving thread %s (%s): %s", snapshot.id, snapshot.name, action)
                await thread.edit(archived=True)
                updated = snapshot
            else:
                updated = self.classifier.apply_to_snapshot(snapshot, action, tags)
                if updated.applied_tags == snapshot.applied_tags:
                    logger.debug("[LIFECYCLE] Thread %s already in desired tag state for %s", snapshot.id, action)
                    return snapshot
                logger.info("[LIFECYCLE] %s on thread %s (%s)", action, snapshot.id, snapshot.name)
                await thread.edit(applied_tags=[discord.Object(id=tag_id) for tag_id in updated.applied_tags])
        except asyncio.CancelledError:
            raise
        except discord.HTTPException as exc:
            logger.warning("[LIFECYCLE] Discord rejected %s on thread %s: %s", action, snapshot.id, exc)
        except Exception as exc:
            logger.exception("[LIFECYCLE] Error during %s on thread %s: %s", action, snapshot.id, exc)
        else:
            if report is not None:
                report.record(action)
            return updated

        if report is not None:
            report.record_error(snapshot.id)
        return None
