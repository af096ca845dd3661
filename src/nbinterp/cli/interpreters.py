"""Interpreter commands: interpreters, run, complete."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from nbinterp.cli import _load_settings, app, console


@app.command()
def interpreters(
    project_dir: Annotated[Optional[Path], typer.Option("--project", "-p", help="Project directory (default: current dir)")] = None,
) -> None:
    """List registered interpreter types and the configured sessions."""
    import nbinterp.interpreters  # noqa: F401 - registers built-in interpreters
    from nbinterp.engine.interpreter import list_interpreters

    table_out = Table(title="Interpreters")
    table_out.add_column("Name", style="bold")
    table_out.add_column("Group")
    table_out.add_column("Property")
    table_out.add_column("Default")
    for info in list_interpreters():
        first = True
        for prop in info["properties"]:
            table_out.add_row(
                info["name"] if first else "",
                info["group"] if first else "",
                prop["name"],
                str(prop["default"]),
            )
            first = False
    console.print(table_out)

    settings = _load_settings(project_dir)
    sessions = Table(title="Sessions")
    sessions.add_column("Session", style="bold")
    sessions.add_column("Type")
    sessions.add_column("Overrides")
    for name in sorted(settings.interpreters):
        setting = settings.interpreters[name]
        sessions.add_row(name, setting.type, ", ".join(sorted(setting.properties)) or "-")
    console.print(sessions)


def _render(result) -> None:
    from nbinterp.engine.interpreter import ResultType

    if result.type is ResultType.TABLE and result.message:
        lines = result.message.rstrip("\n").split("\n")
        table = Table(show_lines=False)
        for col in lines[0].split("\t"):
            table.add_column(col, no_wrap=False, max_width=60)
        for line in lines[1:]:
            table.add_row(*line.split("\t"))
        console.print(table)
        console.print(f"[dim]{len(lines) - 1} rows[/dim]")
    else:
        console.print(result.message, markup=False, highlight=False)


@app.command()
def run(
    session: Annotated[str, typer.Argument(help="Session name from interpreters.yml (e.g. psql, xd)")],
    text: Annotated[Optional[str], typer.Argument(help="Paragraph text (omit to use --file)")] = None,
    file: Annotated[Optional[Path], typer.Option("--file", "-f", help="Read the paragraph from a file")] = None,
    note: Annotated[str, typer.Option("--note", help="Notebook id")] = "cli",
    paragraph: Annotated[str, typer.Option("--paragraph", help="Paragraph id")] = "paragraph-1",
    project_dir: Annotated[Optional[Path], typer.Option("--project", "-p", help="Project directory (default: current dir)")] = None,
) -> None:
    """Run one paragraph through an interpreter session and print the result.

    The session is closed afterwards, so SpringXD resources deployed by the
    paragraph are destroyed when the command exits.
    """
    from rich.markup import escape

    from nbinterp import setup_logging
    from nbinterp.engine.interpreter import Code
    from nbinterp.engine.secrets import mask_output
    from nbinterp.engine.sessions import SessionManager

    if file is not None:
        text = file.read_text()
    if not text or not text.strip():
        console.print("[red]Empty paragraph. Provide text or --file.[/red]")
        raise typer.Exit(1)

    settings = _load_settings(project_dir)
    setup_logging(settings.logging.level)
    manager = SessionManager(settings)
    try:
        interpreter = manager.get(session)
    except KeyError:
        console.print(f"[red]Unknown session:[/red] {session}. Configured: {', '.join(manager.names())}")
        raise typer.Exit(1)

    try:
        interpreter.open()
        result = interpreter.interpret(text, manager.context(note, paragraph))
    finally:
        manager.close_all()

    if result.code is Code.ERROR:
        console.print(f"[red]Error:[/red] {escape(mask_output(result.message, settings.project_dir))}")
        raise typer.Exit(1)
    _render(result)


@app.command()
def complete(
    session: Annotated[str, typer.Argument(help="Session name from interpreters.yml")],
    buffer: Annotated[str, typer.Argument(help="Editor buffer")],
    cursor: Annotated[Optional[int], typer.Option("--cursor", "-c", help="Cursor offset (default: end of buffer)")] = None,
    project_dir: Annotated[Optional[Path], typer.Option("--project", "-p", help="Project directory (default: current dir)")] = None,
) -> None:
    """Print completion suggestions for a buffer."""
    from nbinterp.engine.sessions import SessionManager

    settings = _load_settings(project_dir)
    manager = SessionManager(settings)
    try:
        interpreter = manager.get(session)
    except KeyError:
        console.print(f"[red]Unknown session:[/red] {session}")
        raise typer.Exit(1)

    try:
        suggestions = interpreter.completion(buffer, len(buffer) if cursor is None else cursor)
    finally:
        manager.close_all()

    if suggestions is None:
        console.print("[yellow]No completions available.[/yellow]")
        return
    for s in suggestions:
        console.print(s, markup=False, highlight=False)
