"""CLI interface for the notebook interpreters.

The Typer app and shared helpers live here; each module registers its commands.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

app = typer.Typer(
    name="nbinterp",
    help="Notebook interpreters for PostgreSQL and SpringXD.",
    no_args_is_help=True,
)
console = Console()


def _load_settings(project_dir: Path | None = None):
    """Load interpreters.yml from the project directory (defaults if missing)."""
    from nbinterp.config import load_settings

    return load_settings(project_dir or Path.cwd())


# Import submodules so they register their commands on `app`.
from nbinterp.cli import admin  # noqa: E402, F401
from nbinterp.cli import interpreters  # noqa: E402, F401
