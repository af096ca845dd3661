"""FastAPI host for interpreter sessions.

Exposes the interpreter lifecycle over HTTP so a notebook frontend can open
sessions, run paragraphs, cancel them, ask for completions, and flip a
paragraph's status toggle.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from nbinterp import __version__
from nbinterp.config import load_settings
from nbinterp.engine.interpreter import Interpreter
from nbinterp.engine.sessions import SessionManager

logger = logging.getLogger("nbinterp.server")

# Set by CLI before starting uvicorn
PROJECT_DIR: Path = Path.cwd()

app = FastAPI(title="nbinterp", version=__version__)

_manager: SessionManager | None = None


def get_manager() -> SessionManager:
    global _manager
    if _manager is None:
        _manager = SessionManager(load_settings(PROJECT_DIR))
    return _manager


def reset_manager() -> None:
    """Close every session and forget the manager (settings are reloaded on next use)."""
    global _manager
    if _manager is not None:
        _manager.close_all()
    _manager = None


def _session(name: str) -> Interpreter:
    try:
        return get_manager().get(name)
    except KeyError:
        raise HTTPException(404, f"Unknown session: {name}")


# --- Pydantic models ---


class ParagraphRef(BaseModel):
    note_id: str = Field(..., min_length=1)
    paragraph_id: str = Field(..., min_length=1)


class InterpretRequest(ParagraphRef):
    text: str = Field(default="", max_length=1_000_000)


class CompletionRequest(BaseModel):
    buffer: str = ""
    cursor: int = 0


class StatusUpdate(BaseModel):
    value: str = Field(..., min_length=1)


# --- Sessions ---


@app.get("/api/sessions")
def list_sessions() -> list[dict[str, Any]]:
    manager = get_manager()
    return [
        {"name": name, "type": manager.settings.interpreters[name].type}
        for name in manager.names()
    ]


@app.post("/api/sessions/{name}/open")
def open_session(name: str) -> dict[str, Any]:
    interpreter = _session(name)
    interpreter.open()
    return {"state": interpreter.state.value, "error": interpreter.connect_error}


@app.post("/api/sessions/{name}/close")
def close_session(name: str) -> dict[str, Any]:
    interpreter = _session(name)
    interpreter.close()
    return {"state": interpreter.state.value}


@app.post("/api/sessions/{name}/interpret")
def interpret(name: str, req: InterpretRequest) -> dict[str, str]:
    interpreter = _session(name)
    context = get_manager().context(req.note_id, req.paragraph_id)
    result = interpreter.interpret(req.text, context)
    return result.to_dict()


@app.post("/api/sessions/{name}/cancel")
def cancel(name: str, req: ParagraphRef) -> dict[str, str]:
    interpreter = _session(name)
    interpreter.cancel(get_manager().context(req.note_id, req.paragraph_id))
    return {"status": "ok"}


@app.post("/api/sessions/{name}/completion")
def completion(name: str, req: CompletionRequest) -> dict[str, Any]:
    interpreter = _session(name)
    return {"completions": interpreter.completion(req.buffer, req.cursor)}


@app.get("/api/sessions/{name}/progress")
def progress(name: str, note_id: str, paragraph_id: str) -> dict[str, int]:
    interpreter = _session(name)
    context = get_manager().context(note_id, paragraph_id)
    return {"progress": interpreter.get_progress(context)}


# --- Paragraph status toggles ---


@app.get("/api/notebooks/{note_id}/paragraphs/{paragraph_id}/status")
def get_status(note_id: str, paragraph_id: str) -> dict[str, str]:
    binding = get_manager().events.get(note_id, paragraph_id)
    if binding is None:
        raise HTTPException(404, "No status bound to this paragraph")
    return {"name": binding.name, "value": binding.value}


@app.post("/api/notebooks/{note_id}/paragraphs/{paragraph_id}/status")
def set_status(note_id: str, paragraph_id: str, update: StatusUpdate) -> dict[str, str]:
    """Publish a new status value; a DESTROYED value tears down the paragraph's resources."""
    if not get_manager().events.publish(note_id, paragraph_id, update.value):
        raise HTTPException(404, "No status bound to this paragraph")
    logger.info("Status of [%s:%s] set to %s", note_id, paragraph_id, update.value)
    return {"value": update.value}
