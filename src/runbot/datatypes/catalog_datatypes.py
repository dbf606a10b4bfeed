"""
Catalog records: languages, compilers and the names used to look them up.

Language names compare ASCII-case-insensitively ("Rust" == "rust") while
compiler names compare exactly ("gcc-head" != "GCC-head"). The two wrappers
are kept as separate types so the rules are never mixed up.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


@dataclass(frozen=True, slots=True)
class LanguageID:
    """Opaque 64-bit language identifier derived from the language name."""

    value: int

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class CompilerID:
    """Opaque 64-bit compiler identifier derived from the compiler name."""

    value: int

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


class LanguageName:
    """Language name with ASCII-case-insensitive equality and hashing."""

    __slots__ = ("_text", "_folded")

    def __init__(self, text: str) -> None:
        self._text = str(text)
        self._folded = self._text.translate(_ASCII_LOWER)

    @property
    def text(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"LanguageName({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LanguageName):
            return self._folded == other._folded
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._folded)


class CompilerName:
    """Compiler name; equality and hashing are case-sensitive."""

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = str(text)

    @property
    def text(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"CompilerName({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CompilerName):
            return self._text == other._text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)


class CompilerSpec:
    """User input that names either a language or a compiler."""

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = str(text)

    def as_language_name(self) -> LanguageName:
        return LanguageName(self._text)

    def as_compiler_name(self) -> CompilerName:
        return CompilerName(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"CompilerSpec({self._text!r})"


@dataclass(frozen=True, slots=True)
class Language:
    """A programming language known to the catalog."""

    id: LanguageID
    name: LanguageName
    aliases: FrozenSet[LanguageName] = field(default_factory=frozenset)
    default_compiler_id: Optional[CompilerID] = None

    def is_named_as(self, name: LanguageName) -> bool:
        """True if ``name`` is the canonical name or one of the aliases."""
        return self.name == name or name in self.aliases


@dataclass(frozen=True, slots=True)
class Compiler:
    """A compiler known to the catalog.

    ``wandbox_name`` is the identifier the remote compile provider expects,
    which is usually not the display name.
    """

    id: CompilerID
    name: CompilerName
    version: Optional[str]
    language_id: LanguageID
    wandbox_name: str
