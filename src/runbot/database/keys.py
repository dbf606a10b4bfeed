"""
Key naming for settings stored in Redis.

- channel value:  ``channel:<guild>:<channel>:<field>``
- guild default:  ``channel:<guild>:default:<field>``

``auto`` and ``auto_save`` hold ``0``/``1``; ``remap`` is a hash from
language ID to compiler ID. An optional prefix namespaces every key so
several deployments can share one Redis database.
"""

from __future__ import annotations

import re
from typing import Optional

from runbot.datatypes.discord_datatypes import ChannelID, GuildID
from runbot.datatypes.setting_datatypes import DefaultKey, Field, RoomKey, StoredKey

DEFAULT_SEGMENT = "default"

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class KeyEncoder:
    """Turns ``StoredKey`` values into Redis key strings and back."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def encode(self, key: StoredKey) -> str:
        if isinstance(key, RoomKey):
            return f"{self.prefix}channel:{key.guild_id}:{key.channel_id}:{key.field.key_name}"
        return f"{self.prefix}channel:{key.guild_id}:{DEFAULT_SEGMENT}:{key.field.key_name}"

    def room_scan_pattern(self, guild_id: GuildID, field: Field) -> str:
        """Glob matching every channel key of ``field`` in the guild.

        Redis ``*`` spans any characters, the default key included, so
        scan results go through ``parse_room_key`` before use.
        """
        return f"{escape_glob(self.prefix)}channel:{guild_id}:*:{field.key_name}"

    def parse_room_key(self, raw: str, guild_id: GuildID, field: Field) -> Optional[RoomKey]:
        """Return the ``RoomKey`` encoded by ``raw``, or None if it is not one."""
        if not raw.startswith(self.prefix):
            return None
        parts = raw[len(self.prefix):].split(":")
        if len(parts) != 4:
            return None
        kind, guild, channel, field_name = parts
        if kind != "channel" or guild != str(guild_id) or field_name != field.key_name:
            return None
        if not (channel.isascii() and channel.isdigit()):
            return None
        try:
            channel_id = ChannelID(channel)
        except ValueError:
            return None
        return RoomKey(guild_id, channel_id, field)


def default_key(guild_id: GuildID, field: Field) -> DefaultKey:
    return DefaultKey(guild_id, field)


def room_key(guild_id: GuildID, channel_id: ChannelID, field: Field) -> RoomKey:
    return RoomKey(guild_id, channel_id, field)
