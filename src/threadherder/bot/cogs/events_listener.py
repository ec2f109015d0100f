"""Event listener Cog for Thread Herder.

This cog handles bot lifecycle events (on_ready) and command error handling.
On the first ready event it registers the persistent "Mark as solved" view and
starts the garbage collection scheduler.
"""

import discord
from discord.ext import commands

from threadherder.interactions.dispatcher import InteractionDispatcher
from threadherder.scheduler.gc_scheduler import GarbageCollectionScheduler
from threadherder.ui.forum_views import MarkSolvedView
from threadherder.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and command error handlers."""

    def __init__(
        self,
        discord_bot_instance,
        scheduler: GarbageCollectionScheduler,
        dispatcher: InteractionDispatcher,
    ):
        """Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        scheduler:
            Garbage collection scheduler started once the bot is ready.
        dispatcher:
            Dispatcher handling clicks on the persistent button view.
        """
        self.bot = discord_bot_instance
        self.scheduler = scheduler
        self.dispatcher = dispatcher
        self._views_registered = False
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """Log the connection, restore persistent views and start garbage collection.

        on_ready fires again after every reconnect; both steps are idempotent.
        """
        if self.bot.user:
            logger.info(f"Connected to the gateway as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        if not self._views_registered:
            self.bot.add_view(MarkSolvedView(self.dispatcher))
            self._views_registered = True

        self.scheduler.start()

    @commands.Cog.listener(name='on_application_command_error')
    async def on_application_command_error(self, application_context: discord.ApplicationContext, error: Exception):
        """Handle errors from application commands with logging and user feedback.

        Parameters
        ----------
        application_context:
            The command invocation context.
        error:
            The exception raised during command execution.
        """
        if isinstance(error, commands.CommandNotFound):
            return

        command_name = getattr(application_context.command, 'name', '<unknown>')
        logger.error(f"Error in command '{command_name}': {error}", exc_info=True)

        error_message = "A :bug: showed up while running this command."
        try:
            await application_context.respond(error_message, ephemeral=True)
        except discord.InteractionResponded:
            await application_context.followup.send(error_message, ephemeral=True)


def setup(discord_bot_instance, scheduler: GarbageCollectionScheduler, dispatcher: InteractionDispatcher):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, scheduler, dispatcher))
