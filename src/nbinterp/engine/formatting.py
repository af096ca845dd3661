"""Result formatting for notebook paragraphs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

TAB = "\t"
NEWLINE = "\n"
UPDATE_COUNT_HEADER = "Update Count"

_RESERVED_RE = re.compile(r"[\t\n]")
_EXPLAIN_RE = re.compile(r"^\s*explain\b", re.IGNORECASE)


@dataclass
class TabularResult:
    """Column names plus row-aligned cell values."""

    columns: list[str]
    rows: list[list[Any]] = field(default_factory=list)

    @classmethod
    def from_cursor(cls, cursor: Any, max_rows: int) -> TabularResult:
        """Read a DB-API cursor that has a result set."""
        columns = [desc[0] for desc in cursor.description]
        rows = cursor.fetchmany(max_rows) if max_rows > 0 else cursor.fetchall()
        return cls(columns=columns, rows=[list(r) for r in rows])


def is_explain(sql: str) -> bool:
    return bool(_EXPLAIN_RE.match(sql))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _sanitize(value: Any) -> str:
    """Replace tabs and newlines so the value cannot break the grid."""
    return _RESERVED_RE.sub(" ", _cell(value))


def format_table(result: TabularResult) -> str:
    """Tab-separated header line followed by one line per row."""
    lines = [TAB.join(_sanitize(c) for c in result.columns)]
    for row in result.rows:
        lines.append(TAB.join(_sanitize(v) for v in row))
    return NEWLINE.join(lines) + NEWLINE


def format_text(result: TabularResult) -> str:
    """Plain text rendering: every header and cell value on its own line, untouched."""
    out: list[str] = []
    out.extend(_cell(c) for c in result.columns)
    for row in result.rows:
        out.extend(_cell(v) for v in row)
    return "".join(v + NEWLINE for v in out)


def format_update_count(count: int) -> str:
    return f"{UPDATE_COUNT_HEADER}{NEWLINE}{count}{NEWLINE}"
