"""Paragraph status bindings.

An interpreter binds a named status value to a paragraph (for example
``resourceStatus_p1 = "DEPLOYED"``) and subscribes a handler for it. The UI
changes the value through the host, which publishes the new value here; the
subscribed handler then reacts, e.g. by destroying the paragraph's resources.
Handlers run on the publishing thread.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger("nbinterp.events")

StatusHandler = Callable[[str, str, str], None]


class ResourceStatus(str, Enum):
    DEPLOYED = "DEPLOYED"
    DESTROYED = "DESTROYED"


@dataclass
class StatusBinding:
    note_id: str
    paragraph_id: str
    name: str
    value: str
    handler: StatusHandler | None = None


class EventChannel:
    """Status values keyed by (note, paragraph), each with one optional handler."""

    def __init__(self) -> None:
        self._bindings: dict[tuple[str, str], StatusBinding] = {}
        self._lock = threading.Lock()

    def bind(
        self,
        note_id: str,
        paragraph_id: str,
        name: str,
        value: str,
        handler: StatusHandler | None = None,
    ) -> StatusBinding:
        """Bind (or rebind) the paragraph's status. Replaces any previous handler."""
        binding = StatusBinding(note_id, paragraph_id, name, value, handler)
        with self._lock:
            self._bindings[(note_id, paragraph_id)] = binding
        return binding

    def get(self, note_id: str, paragraph_id: str) -> StatusBinding | None:
        with self._lock:
            return self._bindings.get((note_id, paragraph_id))

    def unbind(self, note_id: str, paragraph_id: str) -> None:
        with self._lock:
            self._bindings.pop((note_id, paragraph_id), None)

    def publish(self, note_id: str, paragraph_id: str, value: str) -> bool:
        """Set a new status value and run the paragraph's handler.

        Returns False when nothing is bound for the paragraph.
        """
        with self._lock:
            binding = self._bindings.get((note_id, paragraph_id))
            if binding is None:
                return False
            old_value = binding.value
            binding.value = value
            handler = binding.handler

        logger.debug(
            "Status %s of [%s:%s]: %s -> %s",
            binding.name, note_id, paragraph_id, old_value, value,
        )
        if handler is not None and old_value != value:
            handler(note_id, paragraph_id, value)
        return True
