"""
Error types raised by runbot.

``RunbotError`` subclasses are recoverable and meant to be shown to the user
who issued the command. ``CatalogError`` subclasses are raised while loading
the catalog at startup. ``InvariantViolation`` marks a programming error and
is never caught by the core.
"""

from __future__ import annotations

from runbot.datatypes.catalog_datatypes import CompilerName, CompilerSpec, LanguageName


class RunbotError(Exception):
    """Base class of every user-facing runbot error."""


class UnknownLanguageName(RunbotError):
    def __init__(self, name: LanguageName) -> None:
        self.name = name
        super().__init__(f"unknown language name {name}")


class UnknownCompilerName(RunbotError):
    def __init__(self, name: CompilerName) -> None:
        self.name = name
        super().__init__(f"unknown compiler name {name}")


class UnknownCompilerSpec(RunbotError):
    def __init__(self, spec: CompilerSpec) -> None:
        self.spec = spec
        super().__init__(f"unknown compiler spec {spec}")


class UnmappedLanguage(RunbotError):
    def __init__(self, name: LanguageName) -> None:
        self.name = name
        super().__init__(f"no (default) compiler can be found for language {name}")


class NoCompilerSpecified(RunbotError):
    def __init__(self) -> None:
        super().__init__("no compiler is specified, but is required")


class RemapMismatch(RunbotError):
    def __init__(self, compiler_name: CompilerName, language_name: LanguageName) -> None:
        self.compiler_name = compiler_name
        self.language_name = language_name
        super().__init__(f"{compiler_name} is not a compiler for {language_name}")


class StoreUnavailable(RunbotError):
    """The settings backend could not be reached or answered with an error."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"database error: {detail}")


class CompileProviderError(RunbotError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"network error: {detail}")


class CatalogError(Exception):
    """The catalog file is malformed or violates a catalog invariant."""


class DuplicateDefaultCompiler(CatalogError):
    def __init__(self, language_name: str) -> None:
        self.language_name = language_name
        super().__init__(f"Duplicated default compiler found for language {language_name}")


class IdentifierCollision(CatalogError):
    def __init__(self, first: str, second: str, value: int) -> None:
        self.first = first
        self.second = second
        self.value = value
        super().__init__(f"{first!r} and {second!r} hash to the same identifier {value}")


class InvalidCatalogEntry(CatalogError):
    pass


class InvariantViolation(LookupError):
    """A catalog ID that should always exist was not found."""
