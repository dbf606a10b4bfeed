"""
SettingsResolver: scoped reads and writes of per-channel settings.

Reads fall back in two levels: the channel's own value, then the guild
default, then the built-in default of the field.

Writes with ``Scope.room`` touch one key. Writes with ``Scope.community``
overwrite every channel key that already exists for the field (found with a
SCAN) and then the guild default, so customised channels follow the new
value and untouched or future channels pick it up through the fallback.

A guild-wide write is a sequence of independent round-trips, not a
transaction. If the backend fails half-way some channels keep the old value
until the write is repeated. Per-guild locks only keep two guild-wide writes
issued by this process from interleaving.
"""

from __future__ import annotations

import asyncio
import weakref
from typing import Awaitable, Callable, List, Optional, Tuple

from runbot.database.keys import KeyEncoder, default_key, room_key
from runbot.database.store import KeyValueStore
from runbot.datatypes.catalog_datatypes import CompilerID, LanguageID
from runbot.datatypes.discord_datatypes import ChannelID, GuildID
from runbot.datatypes.setting_datatypes import (
    AUTO_DEFAULT,
    AUTO_SAVE_DEFAULT,
    Field,
    Scope,
)
from runbot.errors import StoreUnavailable
from runbot.util.logger import get_logger

logger = get_logger("settings_resolver")

KeyWriter = Callable[[str], Awaitable[None]]


class SettingsResolver:
    """Data access for the auto, auto-save and remap settings."""

    def __init__(self, store: KeyValueStore, key_prefix: str = "") -> None:
        self._store = store
        self._keys = KeyEncoder(key_prefix)
        # Entries vanish once no write holds or waits on the lock.
        self._per_guild_locks: "weakref.WeakValueDictionary[GuildID, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, guild_id: GuildID) -> asyncio.Lock:
        lock = self._per_guild_locks.get(guild_id)
        if lock is None:
            lock = asyncio.Lock()
            self._per_guild_locks[guild_id] = lock
        return lock

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def _effective_key(
        self, guild_id: GuildID, channel_id: ChannelID, field: Field
    ) -> Optional[str]:
        """Key holding the value that applies to the channel, or None."""
        channel_key = self._keys.encode(room_key(guild_id, channel_id, field))
        if await self._store.exists(channel_key):
            return channel_key

        guild_key = self._keys.encode(default_key(guild_id, field))
        if await self._store.exists(guild_key):
            return guild_key

        return None

    async def _get_flag(
        self, guild_id: GuildID, channel_id: ChannelID, field: Field, fallback: bool
    ) -> bool:
        key = await self._effective_key(guild_id, channel_id, field)
        if key is None:
            return fallback
        raw = await self._store.get(key)
        if raw is None:
            return fallback
        return _parse_int(key, raw) != 0

    async def get_auto(self, guild_id: GuildID, channel_id: ChannelID) -> bool:
        return await self._get_flag(guild_id, channel_id, Field.AUTO, AUTO_DEFAULT)

    async def get_auto_save(self, guild_id: GuildID, channel_id: ChannelID) -> bool:
        return await self._get_flag(guild_id, channel_id, Field.AUTO_SAVE, AUTO_SAVE_DEFAULT)

    async def get_remap(
        self, guild_id: GuildID, channel_id: ChannelID, language_id: LanguageID
    ) -> Optional[CompilerID]:
        key = await self._effective_key(guild_id, channel_id, Field.REMAP)
        if key is None:
            return None
        raw = await self._store.hget(key, int(language_id))
        if raw is None:
            return None
        return CompilerID(_parse_int(key, raw))

    async def get_remap_all(
        self, guild_id: GuildID, channel_id: ChannelID
    ) -> List[Tuple[LanguageID, CompilerID]]:
        key = await self._effective_key(guild_id, channel_id, Field.REMAP)
        if key is None:
            return []
        entries = await self._store.hgetall(key)
        return [
            (LanguageID(_parse_int(key, language)), CompilerID(_parse_int(key, compiler)))
            for language, compiler in entries
        ]

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def _write(
        self, guild_id: GuildID, scope: Scope, field: Field, writer: KeyWriter
    ) -> None:
        if not scope.is_community:
            await writer(self._keys.encode(room_key(guild_id, scope.channel_id, field)))
            return

        async with self._lock_for(guild_id):
            pattern = self._keys.room_scan_pattern(guild_id, field)
            channel_keys = list(
                dict.fromkeys(
                    raw
                    for raw in await self._store.scan(pattern)
                    if self._keys.parse_room_key(raw, guild_id, field) is not None
                )
            )

            for key in channel_keys:
                await writer(key)
            await writer(self._keys.encode(default_key(guild_id, field)))

        logger.info(
            "[SETTINGS RESOLVER] Broadcast %s to %d channels and the default of guild %s",
            field.key_name,
            len(channel_keys),
            guild_id,
        )

    async def _set_flag(self, guild_id: GuildID, scope: Scope, field: Field, value: bool) -> None:
        stored = 1 if value else 0

        async def write(key: str) -> None:
            await self._store.set(key, stored)

        await self._write(guild_id, scope, field, write)
        logger.debug("[SETTINGS RESOLVER] %s=%d for %s in guild %s", field.key_name, stored, scope, guild_id)

    async def set_auto(self, guild_id: GuildID, scope: Scope, value: bool) -> None:
        await self._set_flag(guild_id, scope, Field.AUTO, value)

    async def set_auto_save(self, guild_id: GuildID, scope: Scope, value: bool) -> None:
        await self._set_flag(guild_id, scope, Field.AUTO_SAVE, value)

    async def set_remap(
        self,
        guild_id: GuildID,
        scope: Scope,
        language_id: LanguageID,
        compiler_id: CompilerID,
    ) -> None:
        async def write(key: str) -> None:
            await self._store.hset(key, int(language_id), int(compiler_id))

        await self._write(guild_id, scope, Field.REMAP, write)
        logger.debug(
            "[SETTINGS RESOLVER] remap %s -> %s for %s in guild %s",
            language_id,
            compiler_id,
            scope,
            guild_id,
        )


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise StoreUnavailable(f"malformed value {raw!r} at {key}") from None
