"""Bookkeeping of resources deployed from notebook paragraphs.

Every stream or job created through an interpreter is recorded under the
(notebook, paragraph) that created it. Re-running a paragraph destroys its
bucket first, so a redeploy replaces rather than duplicates. Destroy failures
are logged and the resource stays registered so the next cascade retries it.
"""

from __future__ import annotations

import logging
from typing import Protocol

from nbinterp.errors import root_cause

logger = logging.getLogger("nbinterp.resources")


class ResourceOperations(Protocol):
    """Creates and destroys one kind of backend resource."""

    def create(self, name: str, definition: str) -> None: ...

    def destroy(self, name: str) -> None: ...


class DeployedResourceRegistry:
    def __init__(self, operations: ResourceOperations) -> None:
        self.operations = operations
        self._notes: dict[str, dict[str, list[str]]] = {}

    def deploy(self, note_id: str, paragraph_id: str, name: str, definition: str) -> None:
        """Create ``name`` in the backend and record it under the paragraph."""
        if not name or not name.strip() or not definition or not definition.strip():
            return
        self.operations.create(name, definition)
        paragraphs = self._notes.setdefault(note_id, {})
        paragraphs.setdefault(paragraph_id, []).append(name)

    def list_for(self, note_id: str, paragraph_id: str) -> list[str]:
        return list(self._notes.get(note_id, {}).get(paragraph_id, []))

    def notes(self) -> list[str]:
        return list(self._notes)

    def destroy_for(self, note_id: str, paragraph_id: str) -> list[str]:
        """Destroy everything a paragraph deployed. Returns the names that failed."""
        paragraphs = self._notes.get(note_id)
        if not paragraphs or paragraph_id not in paragraphs:
            return []

        remaining: list[str] = []
        for name in paragraphs[paragraph_id]:
            try:
                self.operations.destroy(name)
            except Exception as e:
                logger.error(
                    "Failed to destroy resource %s from [%s:%s]: %s",
                    name, note_id, paragraph_id, root_cause(e),
                )
                remaining.append(name)
                continue
            logger.info("Destroyed %s from [%s:%s]", name, note_id, paragraph_id)

        if remaining:
            paragraphs[paragraph_id] = remaining
        else:
            del paragraphs[paragraph_id]
            if not paragraphs:
                del self._notes[note_id]
        return remaining

    def destroy_for_notebook(self, note_id: str) -> list[str]:
        failed: list[str] = []
        for paragraph_id in list(self._notes.get(note_id, {})):
            failed.extend(self.destroy_for(note_id, paragraph_id))
        return failed

    def destroy_all(self) -> list[str]:
        failed: list[str] = []
        for note_id in list(self._notes):
            failed.extend(self.destroy_for_notebook(note_id))
        return failed
