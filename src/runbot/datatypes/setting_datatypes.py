"""
Setting scopes, fields and the keys they are stored under.

- ``Field``: the independently stored setting categories.
- ``Scope``: whether a write targets one channel or the whole guild.
- ``RoomKey`` / ``DefaultKey``: the physical address of a value in the store.
- ``SettingsDump``: the effective settings of one channel, by display name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from runbot.datatypes.catalog_datatypes import CompilerName, LanguageName
from runbot.datatypes.discord_datatypes import ChannelID, GuildID


class Field(Enum):
    """Setting category; the value is the key segment used in the store."""

    AUTO = "auto"
    AUTO_SAVE = "auto_save"
    REMAP = "remap"

    @property
    def key_name(self) -> str:
        return self.value


# Built-in values used when neither the channel nor the guild default has one
AUTO_DEFAULT = True
AUTO_SAVE_DEFAULT = False


@dataclass(frozen=True, slots=True)
class Scope:
    """Target of a settings write.

    ``Scope.room(channel)`` touches a single channel. ``Scope.community()``
    touches every channel with an explicit value plus the guild default,
    which channels without a value of their own fall back to.
    """

    channel_id: Optional[ChannelID] = None

    @classmethod
    def room(cls, channel_id: ChannelID) -> "Scope":
        return cls(channel_id=ChannelID(channel_id))

    @classmethod
    def community(cls) -> "Scope":
        return cls(channel_id=None)

    @classmethod
    def from_flag(cls, is_global: bool, channel_id: ChannelID) -> "Scope":
        """Build the scope of a command issued in ``channel_id``."""
        return cls.community() if is_global else cls.room(channel_id)

    @property
    def is_community(self) -> bool:
        return self.channel_id is None

    def __str__(self) -> str:
        return "guild" if self.is_community else f"channel {self.channel_id}"


@dataclass(frozen=True, slots=True)
class RoomKey:
    """Store address of a channel-specific value."""

    guild_id: GuildID
    channel_id: ChannelID
    field: Field


@dataclass(frozen=True, slots=True)
class DefaultKey:
    """Store address of a guild-wide default value."""

    guild_id: GuildID
    field: Field


StoredKey = Union[RoomKey, DefaultKey]


@dataclass(slots=True)
class SettingsDump:
    """Effective settings of one channel, with catalog IDs translated to names."""

    auto: bool
    auto_save: bool
    remap: List[Tuple[LanguageName, CompilerName]] = field(default_factory=list)
