"""Editor completion helpers.

The editor sends the whole paragraph buffer and a cursor offset. Backends want
only the text of the current line up to the cursor, and the SpringXD
completion API answers with whole lines that repeat that prefix. These helpers
cut the prefix out of the buffer and strip the echoed part from suggestions so
the editor can insert them as-is.
"""

from __future__ import annotations

from nbinterp.engine.definitions import LINE_SEPARATOR

_SEPARATOR_CHARS = ("|", "=")


def prefix_at(buffer: str, cursor: int) -> str:
    """Text of the cursor's line, from the line start up to the cursor.

    A cursor past the end of the buffer clamps to the end of the last line.
    """
    if not buffer:
        return ""
    end = max(0, min(len(buffer), cursor))
    head = buffer[:end]
    line_start = head.rfind(LINE_SEPARATOR)
    line_start = 0 if line_start < 0 else line_start + len(LINE_SEPARATOR)
    return buffer[line_start:end]


def _last_separator_index(prefix: str) -> int:
    for i in range(len(prefix) - 1, -1, -1):
        ch = prefix[i]
        if ch.isspace() or ch in _SEPARATOR_CHARS:
            return i
    return -1


def strip_echo(suggestions: list[str] | None, prefix: str | None) -> list[str] | None:
    """Remove the echoed prefix from each backend suggestion.

    The part of ``prefix`` up to and including its last whitespace, ``|`` or
    ``=`` is removed from the front of every suggestion, which is then
    trimmed. None means the backend gave no answer and is passed through.
    """
    if suggestions is None:
        return None
    if not prefix or not prefix.strip():
        return list(suggestions)

    echoed = prefix[:_last_separator_index(prefix) + 1].strip()
    stripped = []
    for suggestion in suggestions:
        if echoed and suggestion.startswith(echoed):
            suggestion = suggestion[len(echoed):]
        stripped.append(suggestion.strip())
    return stripped


def last_word(prefix: str) -> str:
    """Trailing identifier-like word of ``prefix`` (used for keyword completion)."""
    i = len(prefix)
    while i > 0 and (prefix[i - 1].isalnum() or prefix[i - 1] in "_."):
        i -= 1
    return prefix[i:]
