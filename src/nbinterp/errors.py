"""Error types raised by the interpreters and their backends."""

from __future__ import annotations


class InterpreterError(Exception):
    """Base class for all nbinterp errors."""


class ConnectError(InterpreterError):
    """The backend could not be reached or its URL is malformed."""


class ResourceCreateError(InterpreterError):
    """The backend rejected a stream or job definition."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class ResourceDestroyError(InterpreterError):
    """The backend refused to destroy a deployed stream or job."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class XdClientError(InterpreterError):
    """HTTP error returned by the SpringXD REST API."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


def root_cause(exc: BaseException) -> BaseException:
    """Follow the ``__cause__`` / ``__context__`` chain to the innermost error."""
    seen: set[int] = set()
    current = exc
    while id(current) not in seen:
        seen.add(id(current))
        nxt = current.__cause__
        if nxt is None and not current.__suppress_context__:
            nxt = current.__context__
        if nxt is None:
            break
        current = nxt
    return current


def root_cause_message(exc: BaseException) -> str:
    """Message of the root cause, falling back to its type name."""
    cause = root_cause(exc)
    return str(cause) or type(cause).__name__
