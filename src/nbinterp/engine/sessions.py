"""Interpreter sessions held by a host (CLI or server)."""

from __future__ import annotations

import logging
import threading

from nbinterp.config import Settings
from nbinterp.engine.events import EventChannel
from nbinterp.engine.interpreter import Interpreter, InterpreterContext, get_interpreter

logger = logging.getLogger("nbinterp.sessions")


class SessionManager:
    """One interpreter instance per configured session name.

    Instances are created on first use and share one event channel, so
    status changes published by the UI reach the interpreter that bound them.
    """

    def __init__(self, settings: Settings) -> None:
        import nbinterp.interpreters  # noqa: F401 - registers built-in interpreters

        self.settings = settings
        self.events = EventChannel()
        self._sessions: dict[str, Interpreter] = {}
        self._lock = threading.Lock()

    def names(self) -> list[str]:
        return sorted(self.settings.interpreters)

    def get(self, name: str) -> Interpreter:
        """Return the session's interpreter, creating it if needed.

        Raises KeyError for a session that is not configured or whose type
        is not a registered interpreter.
        """
        with self._lock:
            if name in self._sessions:
                return self._sessions[name]
            setting = self.settings.interpreters.get(name)
            if setting is None:
                raise KeyError(name)
            try:
                interpreter = get_interpreter(setting.type, setting.properties)
            except ValueError as e:
                logger.error("Session %r: %s", name, e)
                raise KeyError(name) from e
            self._sessions[name] = interpreter
            logger.info("Created %s session %r", setting.type, name)
            return interpreter

    def context(self, note_id: str, paragraph_id: str) -> InterpreterContext:
        return InterpreterContext(note_id=note_id, paragraph_id=paragraph_id, events=self.events)

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.items())
            self._sessions.clear()
        for name, interpreter in sessions:
            try:
                interpreter.close()
            except Exception:
                logger.error("Failed to close session %r", name, exc_info=True)
