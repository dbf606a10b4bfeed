"""
Plain-text tables for chat replies.

Every table has two left-aligned columns separated by two spaces and is
meant to be wrapped in a code block by the caller.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from runbot.datatypes.catalog_datatypes import Compiler, Language
from runbot.datatypes.setting_datatypes import SettingsDump

Row = Tuple[str, str]


def render_rows(rows: Sequence[Row | str]) -> str:
    """Render rows; a plain string is a heading printed as-is."""
    width = max((len(row[0]) for row in rows if not isinstance(row, str)), default=0)
    lines: List[str] = []
    for row in rows:
        if isinstance(row, str):
            lines.append(row)
        else:
            left, right = row
            lines.append(f"{left.ljust(width)}  {right}".rstrip())
    return "\n".join(lines)


def _flag(value: bool) -> str:
    return "true" if value else "false"


def compilers_table(compilers: Iterable[Compiler]) -> str:
    return render_rows([(str(c.name), c.version or "unknown") for c in compilers])


def languages_table(languages: Iterable[Language]) -> str:
    return render_rows(
        [(str(lang.name), ",".join(sorted(str(a) for a in lang.aliases))) for lang in languages]
    )


def settings_table(dump: SettingsDump) -> str:
    rows: List[Row | str] = [
        ("auto", _flag(dump.auto)),
        ("auto-save", _flag(dump.auto_save)),
        "remap:",
    ]
    rows.extend((str(language), str(compiler)) for language, compiler in dump.remap)
    return render_rows(rows)


def code_block(text: str) -> str:
    return f"```\n{text}\n```"
