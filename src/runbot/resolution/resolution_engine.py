"""
ResolutionEngine: answers "which compiler applies here" for chat commands.

Combines the static ``Catalog`` with the stored per-channel settings:

- a compiler spec naming a language resolves through the remap override of
  the channel, then the language's default compiler;
- a compiler spec naming a compiler exactly returns that compiler, remaps
  never apply to it;
- a remap may only pair a language with one of its own compilers, checked
  before anything is written.

Every method takes the guild and channel explicitly; the engine holds no
per-command state and is shared by all handlers.
"""

from __future__ import annotations

from typing import List

from runbot.catalog.catalog import Catalog
from runbot.datatypes.catalog_datatypes import (
    Compiler,
    CompilerID,
    CompilerName,
    CompilerSpec,
    Language,
    LanguageID,
    LanguageName,
)
from runbot.datatypes.discord_datatypes import ChannelID, GuildID
from runbot.datatypes.setting_datatypes import Scope, SettingsDump
from runbot.errors import (
    RemapMismatch,
    UnknownCompilerName,
    UnknownCompilerSpec,
    UnknownLanguageName,
    UnmappedLanguage,
)
from runbot.settings.settings_resolver import SettingsResolver
from runbot.util.logger import get_logger

logger = get_logger("resolution_engine")


class ResolutionEngine:
    def __init__(self, catalog: Catalog, settings: SettingsResolver) -> None:
        self.catalog = catalog
        self.settings = settings

    # ------------------------------------------------------------------
    # Compiler resolution
    # ------------------------------------------------------------------

    async def resolve_spec(
        self, guild_id: GuildID, channel_id: ChannelID, spec: CompilerSpec
    ) -> Compiler:
        """Resolve a spec that names either a language or a compiler."""
        language = self.catalog.find_language(spec.as_language_name())
        if language is not None:
            return await self.resolve_language(guild_id, channel_id, language)

        compiler = self.catalog.find_compiler(spec.as_compiler_name())
        if compiler is not None:
            return compiler

        raise UnknownCompilerSpec(spec)

    async def resolve_language_name(
        self, guild_id: GuildID, channel_id: ChannelID, name: LanguageName
    ) -> Compiler:
        language = self.catalog.find_language(name)
        if language is None:
            raise UnknownLanguageName(name)
        return await self.resolve_language(guild_id, channel_id, language)

    async def resolve_language(
        self, guild_id: GuildID, channel_id: ChannelID, language: Language
    ) -> Compiler:
        """Remap override of the channel first, then the catalog default."""
        compiler_id = await self.settings.get_remap(guild_id, channel_id, language.id)
        if compiler_id is None:
            compiler_id = language.default_compiler_id
        if compiler_id is None:
            raise UnmappedLanguage(language.name)
        return self.catalog.get_compiler(compiler_id)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_auto(self, guild_id: GuildID, channel_id: ChannelID) -> bool:
        return await self.settings.get_auto(guild_id, channel_id)

    async def set_auto(self, guild_id: GuildID, scope: Scope, value: bool) -> None:
        await self.settings.set_auto(guild_id, scope, value)

    async def get_auto_save(self, guild_id: GuildID, channel_id: ChannelID) -> bool:
        return await self.settings.get_auto_save(guild_id, channel_id)

    async def set_auto_save(self, guild_id: GuildID, scope: Scope, value: bool) -> None:
        await self.settings.set_auto_save(guild_id, scope, value)

    async def get_remap(
        self, guild_id: GuildID, channel_id: ChannelID, language_id: LanguageID
    ) -> CompilerID | None:
        return await self.settings.get_remap(guild_id, channel_id, language_id)

    async def get_remap_all(
        self, guild_id: GuildID, channel_id: ChannelID
    ) -> List[tuple[Language, Compiler]]:
        """All remap overrides that apply to the channel, as catalog records."""
        return [
            (self.catalog.get_language(language_id), self.catalog.get_compiler(compiler_id))
            for language_id, compiler_id in await self.settings.get_remap_all(guild_id, channel_id)
        ]

    async def set_remap(
        self,
        guild_id: GuildID,
        scope: Scope,
        language_name: LanguageName,
        compiler_name: CompilerName,
    ) -> None:
        """Make ``compiler_name`` the compiler for ``language_name`` within ``scope``.

        Raises:
            UnknownLanguageName: The language is not in the catalog.
            UnknownCompilerName: The compiler is not in the catalog.
            RemapMismatch: The compiler belongs to another language. Nothing is written.
        """
        language = self.catalog.find_language(language_name)
        if language is None:
            raise UnknownLanguageName(language_name)

        compiler = self.catalog.find_compiler(compiler_name)
        if compiler is None:
            raise UnknownCompilerName(compiler_name)

        if compiler.language_id != language.id:
            raise RemapMismatch(compiler.name, language.name)

        await self.settings.set_remap(guild_id, scope, language.id, compiler.id)
        logger.info(
            "[RESOLUTION ENGINE] Remapped %s to %s for %s in guild %s",
            language.name,
            compiler.name,
            scope,
            guild_id,
        )

    async def dump_settings(self, guild_id: GuildID, channel_id: ChannelID) -> SettingsDump:
        auto = await self.get_auto(guild_id, channel_id)
        auto_save = await self.get_auto_save(guild_id, channel_id)
        remap = [
            (language.name, compiler.name)
            for language, compiler in await self.get_remap_all(guild_id, channel_id)
        ]
        return SettingsDump(auto=auto, auto_save=auto_save, remap=remap)

    # ------------------------------------------------------------------
    # Catalog listings
    # ------------------------------------------------------------------

    def list_languages(self) -> List[Language]:
        return list(self.catalog.list_languages())

    def list_compilers_for_language(self, name: LanguageName) -> List[Compiler]:
        language = self.catalog.find_language(name)
        if language is None:
            raise UnknownLanguageName(name)
        return list(self.catalog.list_compilers_for_language(language.id))
