"""
Runbot cog: slash commands for per-channel runbot settings and the catalog.

Commands
- /runbot_show_setting: effective settings of the current channel
- /runbot_auto, /runbot_auto_save: toggle implicit runs and saving
- /runbot_remap: pick the compiler used for a language
- /runbot_list_languages, /runbot_list: browse the catalog

Every write takes a ``global`` option. Without it only the current channel
changes; with it the whole server changes, including channels that were
customised before. Server-wide writes require the Manage Server permission.

This cog is where command errors end up: user mistakes are answered with the
error message, store failures are logged and answered with a short apology.
"""

import discord
from discord import Option
from discord.ext import commands

from runbot.datatypes.catalog_datatypes import CompilerName, LanguageName
from runbot.datatypes.discord_datatypes import ChannelID, GuildID
from runbot.datatypes.setting_datatypes import Scope
from runbot.errors import RunbotError, StoreUnavailable
from runbot.resolution.resolution_engine import ResolutionEngine
from runbot.ui.tables import code_block, compilers_table, languages_table, settings_table
from runbot.util.logger import get_logger

logger = get_logger("runbot_commands")

CONFIRM_REACTION = "✅"
STORE_FAILURE_MESSAGE = "Sorry, the settings store is unavailable right now. Try again later."


class RunbotCog(commands.Cog):
    """Settings and catalog commands backed by a shared ``ResolutionEngine``."""

    def __init__(self, discord_bot_instance, engine: ResolutionEngine):
        self.discord_bot_instance = discord_bot_instance
        self.engine = engine
        logger.info("[RUNBOT CMDS] Runbot cog loaded")

    # ------------------------------------------------------------------
    # Shared checks and replies
    # ------------------------------------------------------------------

    async def _ensure_guild_context(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False
        return True

    def _has_manage_permission(self, ctx: discord.ApplicationContext) -> bool:
        if not isinstance(ctx.user, discord.Member):
            return False
        return ctx.user.guild_permissions.manage_guild

    async def _resolve_scope(self, ctx: discord.ApplicationContext, is_global: bool) -> Scope | None:
        if not await self._ensure_guild_context(ctx):
            return None
        if is_global and not self._has_manage_permission(ctx):
            await ctx.respond("You need Manage Server permission for server-wide changes.", ephemeral=True)
            return None
        return Scope.from_flag(is_global, ChannelID(ctx.channel_id))

    async def _respond_error(self, ctx: discord.ApplicationContext, error: RunbotError) -> None:
        if isinstance(error, StoreUnavailable):
            logger.exception("[RUNBOT CMDS] Store failure in guild %s", ctx.guild_id)
            await ctx.respond(STORE_FAILURE_MESSAGE, ephemeral=True)
            return
        await ctx.respond(str(error), ephemeral=True)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @commands.slash_command(
        name="runbot_show_setting",
        description="Show the runbot settings that apply to this channel.",
    )
    async def show_setting(self, ctx: discord.ApplicationContext):
        if not await self._ensure_guild_context(ctx):
            return
        try:
            dump = await self.engine.dump_settings(GuildID(ctx.guild_id), ChannelID(ctx.channel_id))
        except RunbotError as error:
            await self._respond_error(ctx, error)
            return
        await ctx.respond(code_block(settings_table(dump)))

    @commands.slash_command(
        name="runbot_auto",
        description="Run code blocks automatically in this channel.",
    )
    async def auto(
        self,
        ctx: discord.ApplicationContext,
        enabled: Option(bool, "Run code blocks without a command.", default=True),  # type: ignore
        is_global: Option(bool, "Apply to every channel of the server.", name="global", default=False),  # type: ignore
    ):
        scope = await self._resolve_scope(ctx, is_global)
        if scope is None:
            return
        try:
            await self.engine.set_auto(GuildID(ctx.guild_id), scope, enabled)
        except RunbotError as error:
            await self._respond_error(ctx, error)
            return
        await ctx.respond(CONFIRM_REACTION)

    @commands.slash_command(
        name="runbot_auto_save",
        description="Save automatically run code on the compile provider.",
    )
    async def auto_save(
        self,
        ctx: discord.ApplicationContext,
        enabled: Option(bool, "Save code that runs automatically.", default=True),  # type: ignore
        is_global: Option(bool, "Apply to every channel of the server.", name="global", default=False),  # type: ignore
    ):
        scope = await self._resolve_scope(ctx, is_global)
        if scope is None:
            return
        try:
            await self.engine.set_auto_save(GuildID(ctx.guild_id), scope, enabled)
        except RunbotError as error:
            await self._respond_error(ctx, error)
            return
        await ctx.respond(CONFIRM_REACTION)

    @commands.slash_command(
        name="runbot_remap",
        description="Choose the compiler used for a language.",
    )
    async def remap(
        self,
        ctx: discord.ApplicationContext,
        language: Option(str, "Language name or alias.", required=True),  # type: ignore
        compiler: Option(str, "Compiler name.", required=True),  # type: ignore
        is_global: Option(bool, "Apply to every channel of the server.", name="global", default=False),  # type: ignore
    ):
        scope = await self._resolve_scope(ctx, is_global)
        if scope is None:
            return
        try:
            await self.engine.set_remap(
                GuildID(ctx.guild_id), scope, LanguageName(language), CompilerName(compiler)
            )
        except RunbotError as error:
            await self._respond_error(ctx, error)
            return
        await ctx.respond(CONFIRM_REACTION)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @commands.slash_command(
        name="runbot_list_languages",
        description="List the languages runbot knows.",
    )
    async def list_languages(self, ctx: discord.ApplicationContext):
        await ctx.respond(code_block(languages_table(self.engine.list_languages())))

    @commands.slash_command(
        name="runbot_list",
        description="List the compilers available for a language.",
    )
    async def list_compilers(
        self,
        ctx: discord.ApplicationContext,
        language: Option(str, "Language name or alias.", required=True),  # type: ignore
    ):
        try:
            compilers = self.engine.list_compilers_for_language(LanguageName(language))
        except RunbotError as error:
            await self._respond_error(ctx, error)
            return
        await ctx.respond(code_block(compilers_table(compilers)))


def setup(discord_bot_instance, engine: ResolutionEngine):
    discord_bot_instance.add_cog(RunbotCog(discord_bot_instance, engine))
