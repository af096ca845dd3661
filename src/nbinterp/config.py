"""Interpreter settings: interpreters.yml parsing and defaults."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

SETTINGS_FILE = "interpreters.yml"


class InterpreterSetting(BaseModel):
    """A named interpreter session: registered type plus property overrides."""
    model_config = ConfigDict(extra="ignore")

    type: str
    properties: dict[str, Any] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")
    level: str = "INFO"


def _default_interpreters() -> dict[str, InterpreterSetting]:
    return {
        "psql": InterpreterSetting(type="psql"),
        "xd": InterpreterSetting(type="xd.stream"),
    }


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    interpreters: dict[str, InterpreterSetting] = Field(default_factory=_default_interpreters)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    project_dir: Path = Field(default_factory=Path.cwd)


def _expand_env_vars(value: Any) -> Any:
    """Expand ${ENV_VAR} references in string values."""
    if isinstance(value, str):
        return re.sub(
            r"\$\{(\w+)\}",
            lambda m: os.environ.get(m.group(1), m.group(0)),
            value,
        )
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    return value


def load_settings(project_dir: Path | None = None) -> Settings:
    """Load interpreters.yml from the given directory (or cwd).

    Each entry under ``interpreters`` names its registered ``type``; every
    other key is a property override, e.g.::

        interpreters:
          psql:
            type: psql
            postgresql.url: postgresql://db:5432/analytics
            postgresql.password: ${PG_PASSWORD}
    """
    from nbinterp.engine.secrets import load_env

    project_dir = Path(project_dir) if project_dir else Path.cwd()
    config_path = project_dir / SETTINGS_FILE

    # Load .env secrets into environment before expanding vars
    load_env(project_dir)

    if not config_path.exists():
        return Settings(project_dir=project_dir)

    raw = yaml.safe_load(config_path.read_text()) or {}
    raw = _expand_env_vars(raw)

    interpreters: dict[str, InterpreterSetting] = {}
    for name, entry in (raw.get("interpreters") or {}).items():
        entry = dict(entry or {})
        interp_type = entry.pop("type", name)
        nested = entry.pop("properties", None) or {}
        entry.update(nested)
        interpreters[name] = InterpreterSetting(type=interp_type, properties=entry)

    log_raw = raw.get("logging") or {}
    return Settings(
        interpreters=interpreters or _default_interpreters(),
        logging=LoggingConfig(level=log_raw.get("level", "INFO")),
        project_dir=project_dir,
    )
