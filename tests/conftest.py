"""
Pytest configuration and fixtures for runbot tests.
"""

import copy
import re
import sys
from pathlib import Path

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from runbot.catalog.catalog_loader import build_catalog  # noqa: E402
from runbot.errors import StoreUnavailable  # noqa: E402
from runbot.resolution.resolution_engine import ResolutionEngine  # noqa: E402
from runbot.settings.settings_resolver import SettingsResolver  # noqa: E402


CATALOG_DATA = {
    "languages": {
        "Rust": {
            "aliases": ["rs", "RustLang"],
            "compilers": {
                "rust-stable": {"version": "1.40.0", "wandbox-name": "rust-1.40.0", "default": True},
                "nightly-gcc": {"wandbox-name": "rust-head"},
            },
        },
        "C": {
            "aliases": ["h"],
            "compilers": {
                "gcc-c": {"version": "10.0.0", "wandbox-name": "gcc-head-c", "default": True},
                "clang-c": {"version": "10.0.0", "wandbox-name": "clang-head-c"},
            },
        },
        "Brainfuck": {
            "aliases": ["bf"],
            "compilers": {
                "bf-interp": {"wandbox-name": "bf-head"},
            },
        },
    }
}


def _glob_to_regex(pattern: str) -> re.Pattern:
    """Redis glob: ``*``, ``?``, ``[...]`` and backslash escapes."""
    out = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "*":
            out.append(".*")
        elif char == "?":
            out.append(".")
        elif char == "[":
            end = pattern.index("]", i + 1)
            out.append(pattern[i:end + 1])
            i = end + 1
            continue
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out) + r"\Z", re.DOTALL)


class InMemoryStore:
    """KeyValueStore double with Redis-like semantics.

    ``writes`` records every mutating call; put an operation name such as
    ``"hset"`` into ``fail_on`` to make it raise ``StoreUnavailable``.
    """

    def __init__(self) -> None:
        self.strings = {}
        self.hashes = {}
        self.writes = []
        self.fail_on = set()
        self.fail_after_writes = None

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreUnavailable(f"{operation} failed: connection refused")

    def _record(self, *entry) -> None:
        if self.fail_after_writes is not None and len(self.writes) >= self.fail_after_writes:
            raise StoreUnavailable("connection lost")
        self.writes.append(entry)

    async def get(self, key):
        self._check("get")
        return self.strings.get(key)

    async def exists(self, key):
        self._check("exists")
        return key in self.strings or key in self.hashes

    async def set(self, key, value):
        self._check("set")
        self._record("set", key, str(value))
        self.hashes.pop(key, None)
        self.strings[key] = str(value)

    async def hget(self, key, field):
        self._check("hget")
        return self.hashes.get(key, {}).get(str(field))

    async def hgetall(self, key):
        self._check("hgetall")
        return list(self.hashes.get(key, {}).items())

    async def hset(self, key, field, value):
        self._check("hset")
        self._record("hset", key, str(field), str(value))
        self.hashes.setdefault(key, {})[str(field)] = str(value)

    async def scan(self, pattern):
        self._check("scan")
        regex = _glob_to_regex(pattern)
        keys = list(self.strings) + list(self.hashes)
        return [key for key in keys if regex.match(key)]


@pytest.fixture
def catalog_data():
    return copy.deepcopy(CATALOG_DATA)


@pytest.fixture
def catalog(catalog_data):
    return build_catalog(catalog_data)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def settings(store):
    return SettingsResolver(store)


@pytest.fixture
def engine(catalog, settings):
    return ResolutionEngine(catalog, settings)
