"""
Discord bot and cogs for Thread Herder.

- **thread_herder_bot.py**: ``discord.Bot`` subclass that aborts startup when
  slash command registration fails.

- **cogs/events_listener.py**: Handles bot lifecycle (on_ready), restores the
  persistent button view, starts the garbage collection scheduler and reports
  command errors.

- **cogs/forum_cmds.py**: The ``/solved`` and ``/done`` slash commands.
"""
