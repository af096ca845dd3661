"""Parsing of ``name = definition`` paragraph lines."""

from __future__ import annotations

import logging
import os
import re

logger = logging.getLogger("nbinterp.definitions")

LINE_SEPARATOR = os.linesep

_NAMED_DEFINITION_RE = re.compile(r"\s*(\w*)\s*=\s*(.*)")


def parse_line(line: str) -> tuple[str, str] | None:
    """Split one line into ``(name, definition)``.

    Returns None when the line is not a named definition: no match, or an
    empty name or definition after trimming.
    """
    match = _NAMED_DEFINITION_RE.fullmatch(line)
    if not match:
        return None
    name = match.group(1).strip()
    definition = match.group(2).strip()
    if not name or not definition:
        return None
    return name, definition


def parse_block(text: str) -> list[tuple[str, str]]:
    """Parse every line of a paragraph, skipping lines that are not definitions."""
    definitions: list[tuple[str, str]] = []
    if not text or not text.strip():
        return definitions
    for line in text.split(LINE_SEPARATOR):
        parsed = parse_line(line)
        if parsed is None:
            logger.info("Skipped line: %r", line)
            continue
        definitions.append(parsed)
    return definitions
