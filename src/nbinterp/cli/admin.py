"""Admin commands: serve, version."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from nbinterp.cli import _load_settings, app, console


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Host to bind to")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to bind to")] = 8090,
    project_dir: Annotated[Optional[Path], typer.Option("--project", "-p", help="Project directory (default: current dir)")] = None,
) -> None:
    """Start the interpreter server."""
    import uvicorn

    from nbinterp import setup_logging

    project_dir = project_dir or Path.cwd()
    settings = _load_settings(project_dir)
    setup_logging(settings.logging.level)

    import nbinterp.server.app as server_app

    server_app.PROJECT_DIR = project_dir

    console.print(f"[bold]nbinterp server[/bold] at http://{host}:{port}")
    console.print(f"Sessions: {', '.join(sorted(settings.interpreters))}")
    try:
        uvicorn.run(server_app.app, host=host, port=port)
    finally:
        # Deployed SpringXD resources must not outlive the server
        server_app.reset_manager()


@app.command()
def version() -> None:
    """Show the nbinterp version."""
    from nbinterp import __version__

    console.print(f"nbinterp {__version__}")
