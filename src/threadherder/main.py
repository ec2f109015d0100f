"""
Thread Herder
=============

A Discord bot that keeps forum channels tidy: it archives solved posts once
they go quiet, tags and later archives stale posts, deletes comments on pinned
announcement posts, and offers ``/solved`` and ``/done`` to close a post early.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. THREADHERDER_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("THREADHERDER_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from threadherder.bot.thread_herder_bot import ThreadHerderBot
from threadherder.configuration.app_configuration import AppConfig, app_config
from threadherder.interactions.dispatcher import InteractionDispatcher
from threadherder.interactions.forum_actions import ForumActions
from threadherder.lifecycle.garbage_collector import ThreadGarbageCollector
from threadherder.lifecycle.thread_classifier import ThreadClassifier
from threadherder.scheduler.gc_scheduler import GarbageCollectionScheduler
from threadherder.ui.forum_views import MarkSolvedView
from threadherder.util.logger import enable_file_logging, get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("BOT_TOKEN")
    if not token:
        logger.critical("No $BOT_TOKEN given. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Construct the gateway intents Thread Herder needs.

    Only guild events are required: threads, messages and tags are read
    through the REST API.
    """
    intents = discord.Intents.none()
    intents.guilds = True
    return intents


def build_dispatcher(bot: discord.Bot, config: AppConfig) -> InteractionDispatcher:
    """Create the interaction dispatcher with the forum actions registered."""
    dispatcher = InteractionDispatcher()
    actions = ForumActions(
        bot.fetch_channel,
        solved_tag_name=config.solved_tag_name,
        bypass_user_ids=config.bypass_user_ids,
        moderator_role_ids=config.moderator_role_ids,
        view_factory=lambda: MarkSolvedView(dispatcher),
    )
    actions.register(dispatcher)
    return dispatcher


def build_scheduler(bot: discord.Bot, config: AppConfig) -> GarbageCollectionScheduler:
    """Create the garbage collector and the scheduler that drives it."""
    classifier = ThreadClassifier(
        config.lifecycle_thresholds,
        solved_tag=config.solved_tag_name,
        stale_tag=config.stale_tag_name,
    )
    collector = ThreadGarbageCollector(bot, classifier)
    return GarbageCollectionScheduler(collector.collect_garbage, lambda: config.gc_interval)


def load_cogs(
    discord_bot_instance: discord.Bot,
    scheduler: GarbageCollectionScheduler,
    dispatcher: InteractionDispatcher,
) -> None:
    """Register all operational cogs with the provided Discord bot instance."""
    from threadherder.bot.cogs import events_listener, forum_cmds

    events_listener.setup(discord_bot_instance, scheduler, dispatcher)
    forum_cmds.setup(discord_bot_instance, dispatcher)

    logger.info("All cogs loaded successfully.")


def create_bot(config: AppConfig = app_config) -> tuple[ThreadHerderBot, GarbageCollectionScheduler]:
    """Instantiate the Discord bot, its scheduler and register all cogs."""
    bot = ThreadHerderBot(intents=build_intents())
    dispatcher = build_dispatcher(bot, config)
    scheduler = build_scheduler(bot, config)
    load_cogs(bot, scheduler, dispatcher)
    return bot, scheduler


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and log around the connection lifetime."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, scheduler: GarbageCollectionScheduler | None) -> None:
    """Stop the garbage collection scheduler and close the bot."""
    if scheduler is not None:
        try:
            await scheduler.shutdown()
        except Exception as exc:
            logger.exception("Error during scheduler shutdown: %s", exc)

    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord bot: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the bot and run it until it disconnects, returning an exit code."""
    token = load_environment()

    if app_config.log_directory:
        log_file = enable_file_logging(app_config.log_directory)
        logger.info("Writing logs to %s", log_file)

    try:
        bot, scheduler = create_bot()
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Cannot log in: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Cannot connect: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, scheduler)

    if bot.startup_error is not None:
        exit_code = 1

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting Thread Herder…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
