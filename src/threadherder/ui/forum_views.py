"""
Interactive components attached to forum replies.
"""

from __future__ import annotations

import discord

from threadherder.datatypes.interaction_datatypes import InteractionKind, InteractionRequest
from threadherder.interactions.dispatcher import InteractionDispatcher, send_reply
from threadherder.interactions.forum_actions import MARK_SOLVED_BUTTON_ID
from threadherder.util.logger import get_logger

logger = get_logger("forum_views")


class MarkSolvedView(discord.ui.View):
    """
    Persistent view holding the "Mark as solved" button sent by ``/done``.

    The button has a fixed custom id and the view never times out, so buttons
    sent before a restart keep working once the view is registered again with
    ``bot.add_view``.
    """

    def __init__(self, dispatcher: InteractionDispatcher):
        super().__init__(timeout=None)
        self.dispatcher = dispatcher

    @discord.ui.button(
        label="Mark as solved",
        emoji="✅",
        style=discord.ButtonStyle.success,
        custom_id=MARK_SOLVED_BUTTON_ID,
    )
    async def mark_solved_button(
        self,
        button: discord.ui.Button,
        interaction: discord.Interaction,
    ):
        """Route the click through the dispatcher like a ``/solved`` command."""
        request = InteractionRequest.from_interaction(interaction, InteractionKind.BUTTON, MARK_SOLVED_BUTTON_ID)
        reply = await self.dispatcher.dispatch(request)
        await send_reply(interaction, reply)
