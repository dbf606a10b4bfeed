"""Tests for compiler resolution and remap validation."""

import pytest

from runbot.catalog.catalog_loader import build_catalog
from runbot.datatypes.catalog_datatypes import CompilerName, CompilerSpec, LanguageName
from runbot.datatypes.discord_datatypes import ChannelID, GuildID
from runbot.datatypes.setting_datatypes import Scope, SettingsDump
from runbot.errors import (
    RemapMismatch,
    StoreUnavailable,
    UnknownCompilerName,
    UnknownCompilerSpec,
    UnknownLanguageName,
    UnmappedLanguage,
)
from runbot.resolution.resolution_engine import ResolutionEngine

GUILD = GuildID(42)
ROOM = ChannelID(1001)
OTHER_ROOM = ChannelID(1002)


async def resolve(engine, text, room=ROOM):
    return await engine.resolve_spec(GUILD, room, CompilerSpec(text))


class TestResolveSpec:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["Rust", "rust", "RUST", "rs", "RS", "rustlang"])
    async def test_language_names_and_aliases_resolve_to_default(self, engine, text):
        compiler = await resolve(engine, text)

        assert compiler.name == CompilerName("rust-stable")
        assert compiler.wandbox_name == "rust-1.40.0"

    @pytest.mark.asyncio
    async def test_compiler_name_resolves_directly(self, engine):
        compiler = await resolve(engine, "clang-c")

        assert compiler.name == CompilerName("clang-c")

    @pytest.mark.asyncio
    async def test_compiler_name_is_case_sensitive(self, engine):
        with pytest.raises(UnknownCompilerSpec) as excinfo:
            await resolve(engine, "Clang-C")

        assert str(excinfo.value.spec) == "Clang-C"

    @pytest.mark.asyncio
    async def test_direct_compiler_name_bypasses_remap(self, engine):
        await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("c"), CompilerName("clang-c"))

        compiler = await resolve(engine, "gcc-c")

        assert compiler.name == CompilerName("gcc-c")

    @pytest.mark.asyncio
    async def test_unknown_spec(self, engine):
        with pytest.raises(UnknownCompilerSpec):
            await resolve(engine, "cobol")

    @pytest.mark.asyncio
    async def test_language_without_default_is_unmapped(self, engine):
        with pytest.raises(UnmappedLanguage) as excinfo:
            await resolve(engine, "bf")

        assert excinfo.value.name == LanguageName("Brainfuck")

    @pytest.mark.asyncio
    async def test_remap_gives_unmapped_language_a_compiler(self, engine):
        await engine.set_remap(GUILD, Scope.community(), LanguageName("brainfuck"), CompilerName("bf-interp"))

        compiler = await resolve(engine, "bf", room=OTHER_ROOM)

        assert compiler.name == CompilerName("bf-interp")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["go", "Go", "GO", "golang"])
    async def test_language_match_wins_over_same_named_compiler(self, settings, text):
        engine = ResolutionEngine(
            build_catalog(
                {
                    "languages": {
                        "Go": {
                            "aliases": ["golang"],
                            "compilers": {
                                "go-1.14": {"wandbox-name": "go-1.14.1", "default": True},
                            },
                        },
                        "Assembly": {
                            "aliases": ["asm"],
                            "compilers": {
                                "go": {"wandbox-name": "go-asm"},
                                "golang": {"wandbox-name": "go-asm-head"},
                                "nasm": {"wandbox-name": "nasm-2.14", "default": True},
                            },
                        },
                    }
                }
            ),
            settings,
        )

        compiler = await resolve(engine, text)

        assert compiler.name == CompilerName("go-1.14")
        assert (await resolve(engine, "nasm")).wandbox_name == "nasm-2.14"
        with pytest.raises(UnknownCompilerSpec):
            await resolve(engine, "NASM")


class TestResolveLanguageName:
    @pytest.mark.asyncio
    async def test_uses_room_remap(self, engine):
        await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("Rust"), CompilerName("nightly-gcc"))

        here = await engine.resolve_language_name(GUILD, ROOM, LanguageName("rs"))
        elsewhere = await engine.resolve_language_name(GUILD, OTHER_ROOM, LanguageName("rs"))

        assert here.name == CompilerName("nightly-gcc")
        assert elsewhere.name == CompilerName("rust-stable")

    @pytest.mark.asyncio
    async def test_compiler_name_is_not_a_language(self, engine):
        with pytest.raises(UnknownLanguageName):
            await engine.resolve_language_name(GUILD, ROOM, LanguageName("gcc-c"))


class TestSetRemap:
    @pytest.mark.asyncio
    async def test_mismatch_is_rejected_without_writing(self, engine, store):
        with pytest.raises(RemapMismatch) as excinfo:
            await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("rust"), CompilerName("gcc-c"))

        assert excinfo.value.compiler_name == CompilerName("gcc-c")
        assert excinfo.value.language_name == LanguageName("Rust")
        assert str(excinfo.value) == "gcc-c is not a compiler for Rust"
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_mismatch_on_broadcast_performs_no_scan_or_write(self, engine, store):
        store.fail_on.add("scan")

        with pytest.raises(RemapMismatch):
            await engine.set_remap(GUILD, Scope.community(), LanguageName("c"), CompilerName("nightly-gcc"))

        assert store.writes == []

    @pytest.mark.asyncio
    async def test_unknown_language(self, engine, store):
        with pytest.raises(UnknownLanguageName):
            await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("cobol"), CompilerName("gcc-c"))
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_unknown_compiler(self, engine, store):
        with pytest.raises(UnknownCompilerName):
            await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("c"), CompilerName("tcc"))
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_round_trip_by_display_name(self, engine):
        await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("rust"), CompilerName("nightly-gcc"))

        remaps = await engine.get_remap_all(GUILD, ROOM)
        dump = await engine.dump_settings(GUILD, ROOM)

        assert [(str(lang.name), str(comp.name)) for lang, comp in remaps] == [("Rust", "nightly-gcc")]
        assert dump.remap == [(LanguageName("rust"), CompilerName("nightly-gcc"))]

    @pytest.mark.asyncio
    async def test_get_remap_returns_stored_compiler_id(self, engine, catalog):
        await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("C"), CompilerName("clang-c"))
        language = catalog.find_language(LanguageName("c"))
        clang = catalog.find_compiler(CompilerName("clang-c"))

        assert await engine.get_remap(GUILD, ROOM, language.id) == clang.id

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, engine, store):
        store.fail_on.add("hset")

        with pytest.raises(StoreUnavailable):
            await engine.set_remap(GUILD, Scope.room(ROOM), LanguageName("c"), CompilerName("clang-c"))


class TestDumpAndListings:
    @pytest.mark.asyncio
    async def test_dump_of_untouched_channel(self, engine):
        assert await engine.dump_settings(GUILD, ROOM) == SettingsDump(auto=True, auto_save=False, remap=[])

    @pytest.mark.asyncio
    async def test_dump_reflects_scalar_settings(self, engine):
        await engine.set_auto(GUILD, Scope.community(), False)
        await engine.set_auto_save(GUILD, Scope.room(ROOM), True)

        dump = await engine.dump_settings(GUILD, ROOM)

        assert dump.auto is False
        assert dump.auto_save is True
        assert await engine.get_auto_save(GUILD, OTHER_ROOM) is False

    def test_list_languages_in_catalog_order(self, engine):
        assert [str(lang.name) for lang in engine.list_languages()] == ["Rust", "C", "Brainfuck"]

    def test_list_compilers_for_language_alias(self, engine):
        names = [str(c.name) for c in engine.list_compilers_for_language(LanguageName("RS"))]

        assert names == ["rust-stable", "nightly-gcc"]

    def test_list_compilers_for_unknown_language(self, engine):
        with pytest.raises(UnknownLanguageName):
            engine.list_compilers_for_language(LanguageName("cobol"))
