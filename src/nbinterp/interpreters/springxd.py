"""SpringXD interpreters: deploy stream and job definitions from paragraphs.

A paragraph holds one ``name = definition`` per line. Running it destroys
whatever the paragraph deployed before, then creates and deploys each
definition. The result is an ``%angular`` button bound to the paragraph's
status; clicking it publishes ``DESTROYED`` and the paragraph's resources are
torn down.
"""

from __future__ import annotations

import logging
from typing import Any

from nbinterp.engine.completion import prefix_at, strip_echo
from nbinterp.engine.definitions import parse_block
from nbinterp.engine.events import ResourceStatus
from nbinterp.engine.interpreter import (
    Code,
    ConnectionState,
    Interpreter,
    InterpreterContext,
    InterpreterResult,
    PropertySpec,
    ResultType,
    register_interpreter,
)
from nbinterp.engine.resources import DeployedResourceRegistry
from nbinterp.engine.xd_client import ResourceKind, XdClient, XdResourceOperations
from nbinterp.errors import root_cause_message

logger = logging.getLogger("nbinterp.xd")

SPRINGXD_URL = "springxd.url"
DEFAULT_SPRINGXD_URL = "http://localhost:9393"


def status_id(paragraph_id: str) -> str:
    """Name of the UI variable holding a paragraph's deployment status."""
    return "resourceStatus_" + paragraph_id.replace("-", "_")


def destroy_button(paragraph_id: str, resources: list[str]) -> str:
    sid = status_id(paragraph_id)
    return (
        f"%angular <button ng-click='{sid} = \"{ResourceStatus.DESTROYED.value}\"'> "
        f" [{', '.join(resources)}] : {{{{{sid}}}}} </button>"
    )


class SpringXdInterpreter(Interpreter):
    """Shared lifecycle for stream and job interpreters.

    The resource kind selects which REST endpoints the operations object
    talks to; nothing else differs between streams and jobs.
    """

    group = "xd"
    kind: ResourceKind = ResourceKind.STREAM

    properties = [
        PropertySpec(SPRINGXD_URL, DEFAULT_SPRINGXD_URL, "The URL for SpringXD REST API."),
    ]

    def __init__(self, properties: dict[str, Any] | None = None) -> None:
        super().__init__(properties)
        self.client: XdClient | None = None
        self.operations: XdResourceOperations | None = None
        self.registry: DeployedResourceRegistry | None = None

    def _make_client(self, url: str) -> XdClient:
        return XdClient(url)

    def open(self) -> None:
        # Destroy anything deployed by a previous session
        self.close()
        url = str(self.get_property(SPRINGXD_URL))
        try:
            client = self._make_client(url)
        except Exception as e:
            logger.error("Failed to connect to the SpringXD cluster at %s", url, exc_info=True)
            self.state = ConnectionState.CONNECT_FAILED
            self.connect_error = root_cause_message(e)
            return

        self.client = client
        self.operations = XdResourceOperations(client, self.kind)
        if self.registry is None:
            self.registry = DeployedResourceRegistry(self.operations)
        else:
            self.registry.operations = self.operations
        self.state = ConnectionState.CONNECTED
        self.connect_error = None
        logger.info("Connected %s interpreter to %s", self.kind.value, url)

    def close(self) -> None:
        if self.registry is not None:
            failed = self.registry.destroy_all()
            if failed:
                logger.warning("Resources left deployed after close: %s", ", ".join(failed))
        self.client = None
        self.operations = None
        self.state = ConnectionState.DISCONNECTED
        self.connect_error = None

    def interpret(self, text: str, context: InterpreterContext) -> InterpreterResult:
        if self.state is ConnectionState.DISCONNECTED:
            self.open()
        if self.state is ConnectionState.CONNECT_FAILED or self.registry is None:
            return InterpreterResult.error(self.connect_error or "Not connected")

        note_id, paragraph_id = context.note_id, context.paragraph_id

        # Redeploying replaces whatever this paragraph deployed before
        self.registry.destroy_for(note_id, paragraph_id)

        try:
            for name, definition in parse_block(text):
                self.registry.deploy(note_id, paragraph_id, name, definition)
        except Exception as e:
            logger.error("Failed to deploy XD resource", exc_info=True)
            message = root_cause_message(e)
            self.registry.destroy_for(note_id, paragraph_id)
            return InterpreterResult.error(f"Failed to deploy XD resource: {message}")

        self._bind_status(context)
        button = destroy_button(paragraph_id, self.registry.list_for(note_id, paragraph_id))
        logger.info(button)
        return InterpreterResult(Code.SUCCESS, button, ResultType.ANGULAR)

    def _bind_status(self, context: InterpreterContext) -> None:
        if context.events is None:
            return
        context.events.bind(
            context.note_id,
            context.paragraph_id,
            status_id(context.paragraph_id),
            ResourceStatus.DEPLOYED.value,
            self._on_status_change,
        )

    def _on_status_change(self, note_id: str, paragraph_id: str, value: str) -> None:
        if value == ResourceStatus.DESTROYED.value and self.registry is not None:
            logger.info("Destroy requested for [%s:%s]", note_id, paragraph_id)
            self.registry.destroy_for(note_id, paragraph_id)

    def cancel(self, context: InterpreterContext | None) -> None:
        # REST calls are short; there is nothing to interrupt
        pass

    def completion(self, buffer: str, cursor: int) -> list[str] | None:
        if not buffer or not buffer.strip():
            return None
        if self.state is ConnectionState.DISCONNECTED:
            self.open()
        if self.operations is None:
            return None
        prefix = prefix_at(buffer, cursor)
        try:
            suggestions = self.operations.completions(prefix)
        except Exception as e:
            logger.error("Completion error for %r: %s", prefix, root_cause_message(e))
            return None
        if suggestions is None:
            logger.debug("No completion answer for prefix [%s]", prefix)
            return None
        logger.debug("Completion prefix [%s] -> %d suggestions", prefix, len(suggestions))
        return strip_echo(suggestions, prefix)


@register_interpreter
class SpringXdStreamInterpreter(SpringXdInterpreter):
    name = "xd.stream"
    description = "SpringXD stream definitions"
    kind = ResourceKind.STREAM


@register_interpreter
class SpringXdJobInterpreter(SpringXdInterpreter):
    name = "xd.job"
    description = "SpringXD job definitions"
    kind = ResourceKind.JOB
