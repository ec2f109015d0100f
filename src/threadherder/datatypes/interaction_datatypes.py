"""
Datatypes for user-invoked interactions (slash commands and button clicks).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import discord


class InteractionKind(Enum):
    """Which kind of payload an interaction carried."""

    COMMAND = "command"
    BUTTON = "button"


@dataclass(frozen=True)
class InteractionRequest:
    """
    The parts of an incoming interaction the forum actions need.

    Attributes:
        kind: Command invocation or button click.
        name: Command name or button custom id.
        channel_id: Channel the interaction was invoked in.
        guild_id: Guild the interaction was invoked in, if any.
        user_id: Invoking user's id.
        role_ids: Role ids held by the invoking member.
    """

    kind: InteractionKind
    name: str
    channel_id: int | None
    guild_id: int | None
    user_id: int
    role_ids: frozenset[int] = frozenset()

    @classmethod
    def from_interaction(
        cls,
        interaction: discord.Interaction,
        kind: InteractionKind,
        name: str,
    ) -> "InteractionRequest":
        """Build a request from a py-cord interaction (``ApplicationContext`` works too)."""
        user = interaction.user
        roles = getattr(user, "roles", None) or []
        return cls(
            kind=kind,
            name=name,
            channel_id=interaction.channel_id,
            guild_id=interaction.guild_id,
            user_id=user.id if user is not None else 0,
            role_ids=frozenset(role.id for role in roles),
        )


@dataclass
class InteractionReply:
    """
    Single response payload sent back for an interaction.

    Attributes:
        content: Message text.
        ephemeral: Whether only the invoker can see the reply.
        view: Optional interactive component attached to the reply.
    """

    content: str
    ephemeral: bool = False
    view: Any = field(default=None, repr=False)

    @classmethod
    def error(cls, content: str) -> "InteractionReply":
        return cls(content=content, ephemeral=True)
