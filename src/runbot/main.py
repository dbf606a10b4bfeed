"""
Runbot Discord Bot
==================

Lets each server and channel choose which compiler runs which language and
whether code blocks run automatically. Settings live in Redis; the language
and compiler catalog is a static YAML file.
"""

import asyncio
import os
import sys
from pathlib import Path

import discord
from dotenv import load_dotenv

from runbot.catalog.catalog_loader import load_catalog
from runbot.configuration.app_configuration import CONFIG_PATH, AppConfig
from runbot.database.store import RedisStore
from runbot.errors import CatalogError, StoreUnavailable
from runbot.resolution.resolution_engine import ResolutionEngine
from runbot.settings.settings_resolver import SettingsResolver
from runbot.util.logger import get_logger, handle_exception

logger = get_logger("main")


def load_environment() -> str:
    """Load ``.env`` and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=Path(".env"))
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.guilds = True
    return intents


def create_bot(engine: ResolutionEngine) -> discord.Bot:
    """Instantiate the Discord bot and register the runbot cog."""
    from runbot.cog.commands import runbot_cmds

    bot = discord.Bot(intents=build_intents())
    runbot_cmds.setup(bot, engine)
    return bot


async def build_engine(app_config: AppConfig) -> tuple[ResolutionEngine, RedisStore]:
    """Load the catalog, connect the store and wire the resolution engine."""
    catalog = load_catalog(app_config.catalog_path)

    redis_settings = app_config.redis_settings
    store = RedisStore.from_settings(redis_settings)
    try:
        await store.connect()
    except StoreUnavailable:
        await store.close()
        raise

    settings = SettingsResolver(store, key_prefix=redis_settings.key_prefix)
    return ResolutionEngine(catalog, settings), store


async def async_main() -> int:
    token = load_environment()
    app_config = AppConfig(CONFIG_PATH)

    try:
        engine, store = await build_engine(app_config)
    except CatalogError as exc:
        logger.critical("Failed to load the catalog: %s", exc)
        return 1
    except StoreUnavailable as exc:
        logger.critical("Failed to connect to the settings store: %s", exc)
        return 1

    bot = create_bot(engine)
    exit_code = 0
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        if not bot.is_closed():
            await bot.close()
        await store.close()
        logger.info("Shutdown complete.")

    return exit_code


def main() -> int:
    """Entrypoint that runs the bot and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting runbot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
