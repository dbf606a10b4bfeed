"""
Type-safe wrapper classes for Discord identifiers.

A guild is the community a setting belongs to and a channel is the room
inside it that can carry its own override. Both are 64-bit snowflakes that
are only ever used as key components, never interpreted.
"""

from __future__ import annotations

from typing import Union
import discord


class GuildID:
    """
    Type-safe wrapper for Discord guild snowflake IDs.

    Attributes:
        _value (int): The snowflake ID.

    Example:
        >>> gid = GuildID("123456789012345678")
        >>> gid.to_int()
        123456789012345678
        >>> str(gid)
        '123456789012345678'
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "GuildID"]) -> None:
        """
        Initialize a GuildID from a string, int, or another GuildID.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        self._value = _coerce_snowflake(value, GuildID)

    @classmethod
    def from_guild(cls, guild: discord.Guild) -> "GuildID":
        """Create a GuildID from a Discord Guild object."""
        return cls(guild.id)

    def to_int(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"GuildID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GuildID):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("guild", self._value))


class ChannelID:
    """
    Type-safe wrapper for Discord channel snowflake IDs.

    Attributes:
        _value (int): The snowflake ID.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "ChannelID"]) -> None:
        """
        Initialize a ChannelID from a string, int, or another ChannelID.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        self._value = _coerce_snowflake(value, ChannelID)

    @classmethod
    def from_channel(cls, channel: Union[discord.TextChannel, discord.Thread, discord.abc.GuildChannel]) -> "ChannelID":
        """Create a ChannelID from a Discord channel object."""
        return cls(channel.id)

    def to_int(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"ChannelID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ChannelID):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("channel", self._value))


def _coerce_snowflake(value, wrapper: type) -> int:
    if isinstance(value, wrapper):
        return value.to_int()
    if isinstance(value, bool):
        raise ValueError(f"Cannot create {wrapper.__name__} from bool: {value}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        number = int(value.strip())
    else:
        raise ValueError(f"Cannot create {wrapper.__name__} from {type(value).__name__}: {value}")
    if not 0 <= number < 2 ** 64:
        raise ValueError(f"{wrapper.__name__} out of 64-bit range: {number}")
    return number
