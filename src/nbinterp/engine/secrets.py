"""Secrets for interpreter settings.

Passwords and URLs with credentials live in a ``.env`` file next to
``interpreters.yml`` (never committed) and are referenced from the settings as
``${VARIABLE}``.
"""

from __future__ import annotations

import os
from pathlib import Path


def _read_env_file(env_path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        # Strip surrounding quotes
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        values[key] = value
    return values


def load_env(project_dir: Path) -> dict[str, str]:
    """Load secrets from .env into os.environ. Returns the loaded values."""
    loaded = _read_env_file(project_dir / ".env")
    os.environ.update(loaded)
    return loaded


def mask_output(text: str, project_dir: Path) -> str:
    """Mask any secret values that appear in text output."""
    for value in _read_env_file(project_dir / ".env").values():
        if len(value) >= 4:  # Only mask non-trivial values
            text = text.replace(value, "***")
    return text
