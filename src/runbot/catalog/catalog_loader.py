"""
Build a ``Catalog`` from the YAML catalog file.

Expected layout::

    languages:
      Rust:
        aliases: [rs]
        compilers:
          rust-1.40:
            version: "1.40.0"
            wandbox-name: rust-1.40.0
            default: true

IDs are stable 64-bit hashes of the names, so they stay valid in the store
for as long as the names in the file do not change.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from runbot.catalog.catalog import Catalog
from runbot.datatypes.catalog_datatypes import (
    Compiler,
    CompilerID,
    CompilerName,
    Language,
    LanguageID,
    LanguageName,
)
from runbot.errors import (
    CatalogError,
    DuplicateDefaultCompiler,
    IdentifierCollision,
    InvalidCatalogEntry,
)
from runbot.util.logger import get_logger

logger = get_logger("catalog_loader")


def stable_hash(name: str) -> int:
    """64-bit unsigned hash of ``name`` that does not change between runs."""
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


class _IdAllocator:
    """Hands out name-derived IDs and refuses collisions and duplicates."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._names: Dict[int, str] = {}

    def allocate(self, name: str) -> int:
        value = stable_hash(name)
        existing = self._names.get(value)
        if existing is not None:
            if existing == name:
                raise InvalidCatalogEntry(f"duplicate {self.kind} name {name!r}")
            raise IdentifierCollision(existing, name, value)
        self._names[value] = name
        return value


def load_catalog(path: Path) -> Catalog:
    """Read and validate the catalog file at ``path``.

    Raises:
        CatalogError: If the file cannot be read or its content is invalid.
    """
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise CatalogError(f"cannot read catalog {path}: {exc}") from exc

    catalog = build_catalog(data)
    logger.info("[CATALOG] Loaded %d languages from %s", len(catalog), path)
    return catalog


def build_catalog(data: Any) -> Catalog:
    """Build a catalog from the already parsed file content."""
    if not isinstance(data, Mapping) or not isinstance(data.get("languages"), Mapping):
        raise InvalidCatalogEntry("catalog must contain a 'languages' mapping")

    language_ids = _IdAllocator("language")
    compiler_ids = _IdAllocator("compiler")
    languages: List[Language] = []
    compilers: List[Compiler] = []

    for language_name, language_data in data["languages"].items():
        language_name = str(language_name)
        if language_data is None:
            language_data = {}
        if not isinstance(language_data, Mapping):
            raise InvalidCatalogEntry(f"language {language_name!r} must be a mapping")

        language_id = LanguageID(language_ids.allocate(language_name))
        default_compiler: Optional[CompilerID] = None

        compilers_data = language_data.get("compilers") or {}
        if not isinstance(compilers_data, Mapping):
            raise InvalidCatalogEntry(f"compilers of {language_name!r} must be a mapping")

        for compiler_name, compiler_data in compilers_data.items():
            compiler = _build_compiler(str(compiler_name), compiler_data, language_id, compiler_ids)
            if compiler_data.get("default", False):
                if default_compiler is not None:
                    raise DuplicateDefaultCompiler(language_name)
                default_compiler = compiler.id
            compilers.append(compiler)

        canonical = LanguageName(language_name)
        aliases = frozenset(
            alias for alias in map(LanguageName, map(str, language_data.get("aliases") or []))
            if alias != canonical
        )
        languages.append(Language(language_id, canonical, aliases, default_compiler))

    return Catalog(languages, compilers)


def _build_compiler(
    name: str,
    data: Any,
    language_id: LanguageID,
    compiler_ids: _IdAllocator,
) -> Compiler:
    if not isinstance(data, Mapping):
        raise InvalidCatalogEntry(f"compiler {name!r} must be a mapping")
    wandbox_name = data.get("wandbox-name")
    if not wandbox_name:
        raise InvalidCatalogEntry(f"compiler {name!r} is missing 'wandbox-name'")
    version = data.get("version")
    return Compiler(
        id=CompilerID(compiler_ids.allocate(name)),
        name=CompilerName(name),
        version=None if version is None else str(version),
        language_id=language_id,
        wandbox_name=str(wandbox_name),
    )
