"""Shared fakes: a DB-API connection and a SpringXD client."""

from __future__ import annotations

import threading

import pytest

from nbinterp.engine.drivers import DRIVERS, QueryDriver
from nbinterp.errors import XdClientError


class FakeCursor:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self.closed = False
        self._rows: list[tuple] = []

    def execute(self, sql: str) -> None:
        self.conn.executed.append(sql)
        if self.conn.block:
            self.conn.executing.set()
            if not self.conn.cancelled.wait(5):
                raise RuntimeError("query was never cancelled")
            raise RuntimeError("canceling statement due to user request")
        if self.conn.error is not None:
            raise self.conn.error
        if not self.conn.columns:
            self.rowcount = self.conn.rowcount
            return
        names = [name for name, _ in self.conn.columns]
        self.description = [(name, None, None, None, None, None, None) for name in names]
        self._rows = list(zip(*[values for _, values in self.conn.columns]))
        self.rowcount = len(self._rows)

    def fetchmany(self, size: int) -> list[tuple]:
        rows, self._rows = self._rows[:size], self._rows[size:]
        return rows

    def fetchall(self) -> list[tuple]:
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Column-oriented result set, like a JDBC mock result set."""

    def __init__(self) -> None:
        self.columns: list[tuple[str, list]] = []
        self.rowcount = 0
        self.error: Exception | None = None
        self.executed: list[str] = []
        self.cursors: list[FakeCursor] = []
        self.closed = False
        self.block = False
        self.executing = threading.Event()
        self.cancelled = threading.Event()

    def add_column(self, name: str, values: list) -> None:
        self.columns.append((name, values))

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def cancel(self) -> None:
        self.cancelled.set()

    def close(self) -> None:
        self.closed = True

    def all_cursors_closed(self) -> bool:
        return all(c.closed for c in self.cursors)


class FakeDriver(QueryDriver):
    name = "fake"

    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn

    def connect(self, url, user, password):
        self.conn.closed = False
        return self.conn

    def cancel(self, conn, cursor):
        conn.cancel()


@pytest.fixture
def fake_conn(monkeypatch):
    """A FakeConnection served by the ``fake`` driver."""
    conn = FakeConnection()
    monkeypatch.setitem(DRIVERS, "fake", lambda: FakeDriver(conn))
    return conn


class FakeXdClient:
    """Records SpringXD calls; names in ``fail_create`` / ``fail_destroy`` are rejected."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.deployed: dict[str, str] = {}
        self.fail_create: set[str] = set()
        self.fail_destroy: set[str] = set()
        self.suggestions: list[str] | None = []
        self.completion_requests: list[tuple] = []

    def create(self, kind, name, definition, deploy=True):
        self.calls.append(("create", kind, name, definition))
        if name in self.fail_create:
            raise XdClientError(400, f"Could not deploy {name}: bad definition")
        self.deployed[name] = definition

    def destroy(self, kind, name):
        self.calls.append(("destroy", kind, name))
        if name in self.fail_destroy:
            raise XdClientError(500, f"Could not destroy {name}")
        self.deployed.pop(name, None)

    def completions(self, kind, prefix, detail_level=1):
        self.completion_requests.append((kind, prefix))
        if self.suggestions is None:
            raise XdClientError(0, "SpringXD unreachable")
        return list(self.suggestions)


@pytest.fixture
def xd_client(monkeypatch):
    """FakeXdClient returned by every SpringXD interpreter instead of a real client."""
    from nbinterp.interpreters.springxd import SpringXdInterpreter

    client = FakeXdClient()
    monkeypatch.setattr(SpringXdInterpreter, "_make_client", lambda self, url: client)
    return client
