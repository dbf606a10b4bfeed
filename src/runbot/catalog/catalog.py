"""
In-memory registry of languages and compilers.

Built once at startup by ``catalog_loader`` and never mutated afterwards, so
it is shared between command handlers without locking. Name lookups are
linear scans in insertion order and the first match wins.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional

from runbot.datatypes.catalog_datatypes import (
    Compiler,
    CompilerID,
    CompilerName,
    Language,
    LanguageID,
    LanguageName,
)
from runbot.errors import InvalidCatalogEntry, InvariantViolation


class Catalog:
    """Static language and compiler lookups."""

    def __init__(self, languages: Iterable[Language], compilers: Iterable[Compiler]) -> None:
        self._languages: Dict[LanguageID, Language] = {}
        self._compilers: Dict[CompilerID, Compiler] = {}
        for language in languages:
            self._languages[language.id] = language
        for compiler in compilers:
            self._compilers[compiler.id] = compiler
        self._validate()

    def _validate(self) -> None:
        for compiler in self._compilers.values():
            if compiler.language_id not in self._languages:
                raise InvalidCatalogEntry(
                    f"compiler {compiler.name} refers to unknown language id {compiler.language_id}"
                )
        for language in self._languages.values():
            default_id = language.default_compiler_id
            if default_id is None:
                continue
            default = self._compilers.get(default_id)
            if default is None or default.language_id != language.id:
                raise InvalidCatalogEntry(
                    f"default compiler of {language.name} is not one of its compilers"
                )

    # ------------------------------------------------------------------
    # Direct lookups (IDs come from the catalog or validated store content)
    # ------------------------------------------------------------------

    def get_language(self, language_id: LanguageID) -> Language:
        try:
            return self._languages[language_id]
        except KeyError:
            raise InvariantViolation(f"unknown language ID {language_id}") from None

    def get_compiler(self, compiler_id: CompilerID) -> Compiler:
        try:
            return self._compilers[compiler_id]
        except KeyError:
            raise InvariantViolation(f"unknown compiler ID {compiler_id}") from None

    # ------------------------------------------------------------------
    # Name lookups
    # ------------------------------------------------------------------

    def find_language(self, name: LanguageName) -> Optional[Language]:
        """Find a language by canonical name or alias, ignoring ASCII case."""
        return next((lang for lang in self._languages.values() if lang.is_named_as(name)), None)

    def find_compiler(self, name: CompilerName) -> Optional[Compiler]:
        """Find a compiler by exact name."""
        return next((c for c in self._compilers.values() if c.name == name), None)

    def list_languages(self) -> Iterator[Language]:
        return iter(self._languages.values())

    def list_compilers_for_language(self, language_id: LanguageID) -> Iterator[Compiler]:
        return (c for c in self._compilers.values() if c.language_id == language_id)

    def __len__(self) -> int:
        return len(self._languages)
