"""Interpreter contract and registry.

An interpreter adapts a notebook paragraph to an external system. The host
drives it through a small lifecycle:

- ``open()``: establish the backend connection
- ``interpret(text, context)``: run a paragraph, return an ``InterpreterResult``
- ``cancel(context)``: interrupt the running paragraph (may be called from
  another thread while ``interpret`` is blocked)
- ``completion(buffer, cursor)``: suggestions for the editor
- ``get_progress(context)``: percentage done
- ``close()``: release the connection and anything deployed through it

Implementations register themselves with ``@register_interpreter``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nbinterp.engine.events import EventChannel


# ---------------------------------------------------------------------------
# Contract types
# ---------------------------------------------------------------------------


class Code(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    INCOMPLETE = "INCOMPLETE"


class ResultType(str, Enum):
    TEXT = "TEXT"
    TABLE = "TABLE"
    ANGULAR = "ANGULAR"


@dataclass
class InterpreterResult:
    code: Code
    message: str = ""
    type: ResultType = ResultType.TEXT

    @classmethod
    def error(cls, message: str) -> InterpreterResult:
        return cls(Code.ERROR, message, ResultType.TEXT)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "type": self.type.value, "message": self.message}


@dataclass
class InterpreterContext:
    """Identifies the paragraph being run."""

    note_id: str
    paragraph_id: str
    events: EventChannel | None = None


class ConnectionState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTED = "CONNECTED"
    CONNECT_FAILED = "CONNECT_FAILED"


@dataclass
class PropertySpec:
    """A configuration property recognised by an interpreter."""

    name: str
    default: Any
    description: str = ""


class Interpreter:
    """Base class for all interpreters.

    Subclasses set ``name``, ``group``, ``description`` and ``properties`` and
    implement the lifecycle methods.
    """

    name: str = ""
    group: str = ""
    description: str = ""
    properties: list[PropertySpec] = []

    def __init__(self, properties: dict[str, Any] | None = None) -> None:
        self._overrides: dict[str, Any] = dict(properties or {})
        self.state = ConnectionState.DISCONNECTED
        self.connect_error: str | None = None

    def get_property(self, key: str) -> Any:
        """Configured value for ``key``, falling back to the registered default."""
        if key in self._overrides and self._overrides[key] is not None:
            return self._overrides[key]
        for spec in self.properties:
            if spec.name == key:
                return spec.default
        return None

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def interpret(self, text: str, context: InterpreterContext) -> InterpreterResult:
        raise NotImplementedError

    def cancel(self, context: InterpreterContext | None) -> None:
        raise NotImplementedError

    def completion(self, buffer: str, cursor: int) -> list[str] | None:
        return None

    def get_progress(self, context: InterpreterContext | None) -> int:
        return 0


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

INTERPRETERS: dict[str, type[Interpreter]] = {}


def register_interpreter(cls: type[Interpreter]) -> type[Interpreter]:
    """Class decorator that registers an interpreter."""
    INTERPRETERS[cls.name] = cls
    return cls


def get_interpreter(name: str, properties: dict[str, Any] | None = None) -> Interpreter:
    """Instantiate an interpreter by registered name."""
    if name not in INTERPRETERS:
        raise ValueError(
            f"Unknown interpreter: {name!r}. "
            f"Available: {', '.join(sorted(INTERPRETERS))}"
        )
    return INTERPRETERS[name](properties)


def list_interpreters() -> list[dict[str, Any]]:
    """Return metadata for every registered interpreter."""
    results = []
    for name in sorted(INTERPRETERS):
        cls = INTERPRETERS[name]
        results.append({
            "name": cls.name,
            "group": cls.group,
            "description": cls.description,
            "properties": [
                {"name": p.name, "default": p.default, "description": p.description}
                for p in cls.properties
            ],
        })
    return results
