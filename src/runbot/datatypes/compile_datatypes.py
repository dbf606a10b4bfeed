"""
Request and result types of the remote compile provider.

The provider itself lives outside this package; anything with an async
``compile(request)`` method satisfies ``CompileProvider``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from runbot.datatypes.catalog_datatypes import LanguageName


@dataclass(frozen=True, slots=True)
class Code:
    """Source text extracted from a chat message, with its fence language if any."""

    text: str
    language: Optional[LanguageName] = None

    @classmethod
    def with_language(cls, text: str, language: str) -> "Code":
        return cls(text=text, language=LanguageName(language))


@dataclass(frozen=True, slots=True)
class CompileRequest:
    compiler: str
    code: str
    options: List[str] = field(default_factory=list)
    stdin: Optional[str] = None
    save: bool = False

    @property
    def compiler_option_raw(self) -> Optional[str]:
        """Options as the provider expects them: one per line, or None."""
        return "\n".join(self.options) if self.options else None


@dataclass(frozen=True, slots=True)
class CompileResult:
    status: Optional[int] = None
    signal: Optional[str] = None
    compiler_output: Optional[str] = None
    program_output: Optional[str] = None
    permalink: Optional[str] = None


class CompileProvider(Protocol):
    async def compile(self, request: CompileRequest) -> CompileResult:
        ...
