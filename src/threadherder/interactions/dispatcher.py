"""
Routes slash commands and button clicks to their handlers.

Commands and buttons carry different identifiers (command name versus custom
id), so the routing key is the pair ``(InteractionKind, name)``. Every request
produces exactly one :class:`InteractionReply`; unknown keys and handler
crashes turn into ephemeral error replies instead of silence.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Tuple

from threadherder.datatypes.interaction_datatypes import (
    InteractionKind,
    InteractionReply,
    InteractionRequest,
)
from threadherder.util.logger import get_logger

logger = get_logger("interaction_dispatcher")

InteractionHandler = Callable[[InteractionRequest], Awaitable[InteractionReply]]

GENERIC_ERROR_MESSAGE = "A :bug: showed up while handling this interaction."


class InteractionDispatcher:
    """Dispatch table keyed by ``(kind, name)``."""

    def __init__(self) -> None:
        self._handlers: Dict[Tuple[InteractionKind, str], InteractionHandler] = {}

    def register(self, kind: InteractionKind, name: str, handler: InteractionHandler) -> None:
        key = (kind, name)
        if key in self._handlers:
            logger.warning("[DISPATCHER] Replacing handler for %s %r", kind.value, name)
        self._handlers[key] = handler

    def handler_for(self, kind: InteractionKind, name: str) -> InteractionHandler | None:
        return self._handlers.get((kind, name))

    async def dispatch(self, request: InteractionRequest) -> InteractionReply:
        """Run the handler registered for ``request`` and return its reply."""
        handler = self.handler_for(request.kind, request.name)
        if handler is None:
            if request.kind is InteractionKind.COMMAND:
                return InteractionReply.error(f"unknown command {request.name!r}")
            return InteractionReply.error(f"unknown interaction {request.name!r}")

        try:
            return await handler(request)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception(
                "[DISPATCHER] Handler for %s %r failed in channel %s: %s",
                request.kind.value,
                request.name,
                request.channel_id,
                exc,
            )
            return InteractionReply.error(GENERIC_ERROR_MESSAGE)


async def send_reply(target, reply: InteractionReply) -> None:
    """
    Send ``reply`` as the single response to an interaction.

    ``target`` is a py-cord ``ApplicationContext`` or ``Interaction``; both
    expose ``respond``.
    """
    kwargs = {"ephemeral": reply.ephemeral}
    if reply.view is not None:
        kwargs["view"] = reply.view
    await target.respond(reply.content, **kwargs)
