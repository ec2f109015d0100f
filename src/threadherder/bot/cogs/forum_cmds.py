"""
Forum cog: slash commands for closing forum posts early.

This cog exposes two slash commands:
- /solved: Tag the current forum post as solved. Allowed for the post owner,
  moderators and bypass users.
- /done: Ask the post owner to mark the post as solved, with a button.

Both commands only route the invocation through the interaction dispatcher;
the actual checks live in :mod:`threadherder.interactions.forum_actions`.

Quick usage example
    # In your bot setup code
    from threadherder.bot.cogs.forum_cmds import ForumCommandsCog
    bot.add_cog(ForumCommandsCog(bot, dispatcher))
"""

import discord
from discord.ext import commands

from threadherder.datatypes.interaction_datatypes import InteractionKind, InteractionRequest
from threadherder.interactions.dispatcher import InteractionDispatcher, send_reply
from threadherder.interactions.forum_actions import DONE_COMMAND, SOLVED_COMMAND
from threadherder.util.logger import get_logger

logger = get_logger("forum_cog")


class ForumCommandsCog(commands.Cog):
    """Slash commands for marking forum posts as solved."""

    def __init__(self, discord_bot_instance, dispatcher: InteractionDispatcher):
        """Store the bot reference and the dispatcher routing the commands."""
        self.discord_bot_instance = discord_bot_instance
        self.dispatcher = dispatcher
        logger.info("Forum cog loaded")

    async def handle_command(self, ctx: discord.ApplicationContext, name: str) -> None:
        request = InteractionRequest.from_interaction(ctx, InteractionKind.COMMAND, name)
        reply = await self.dispatcher.dispatch(request)
        await send_reply(ctx, reply)

    @commands.slash_command(name=SOLVED_COMMAND, description="marks the current forum post as resolved")
    async def solved(self, ctx: discord.ApplicationContext) -> None:
        await self.handle_command(ctx, SOLVED_COMMAND)

    @commands.slash_command(name=DONE_COMMAND, description="asks the author to mark the current forum post as resolved")
    async def done(self, ctx: discord.ApplicationContext) -> None:
        await self.handle_command(ctx, DONE_COMMAND)


def setup(discord_bot_instance, dispatcher: InteractionDispatcher):
    """Register the ForumCommandsCog with the bot."""
    discord_bot_instance.add_cog(ForumCommandsCog(discord_bot_instance, dispatcher))
