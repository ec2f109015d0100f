"""py-cord bot subclass that treats a failed command sync as fatal."""

from __future__ import annotations

import discord

from threadherder.util.logger import get_logger

logger = get_logger("thread_herder_bot")


class ThreadHerderBot(discord.Bot):
    """
    Bot whose slash commands must be registered before it does any work.

    py-cord syncs application commands on connect and only logs failures.
    Here a failed sync is stored on :attr:`startup_error` and the bot closes,
    so the process exits instead of running without ``/solved`` and ``/done``.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.startup_error: Exception | None = None

    async def on_connect(self) -> None:
        try:
            await self.sync_commands()
        except Exception as exc:
            logger.critical("Cannot update commands: %s", exc)
            self.startup_error = exc
            await self.close()
            return
        logger.info("Application commands registered")
