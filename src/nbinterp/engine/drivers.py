"""DB-API drivers for the SQL interpreter.

A driver knows how to open a connection from the interpreter's URL, user and
password, and how to interrupt a query running on that connection from
another thread.
"""

from __future__ import annotations

from typing import Any

from nbinterp.errors import ConnectError


class QueryDriver:
    name: str = ""

    def connect(self, url: str, user: str | None, password: str | None) -> Any:
        raise NotImplementedError

    def cancel(self, conn: Any, cursor: Any) -> None:
        """Interrupt the statement running on ``cursor``."""
        raise NotImplementedError


class PsycopgDriver(QueryDriver):
    """PostgreSQL through psycopg 3."""

    name = "psycopg"

    def connect(self, url: str, user: str | None, password: str | None) -> Any:
        import psycopg

        if url.startswith("jdbc:"):
            url = url[len("jdbc:"):]
        kwargs: dict[str, Any] = {"autocommit": True}
        if user:
            kwargs["user"] = user
        if password:
            kwargs["password"] = password
        return psycopg.connect(url, **kwargs)

    def cancel(self, conn: Any, cursor: Any) -> None:
        conn.cancel()


class DuckDBDriver(QueryDriver):
    """Embedded DuckDB. The URL is a file path, ``:memory:``, or ``duckdb:///path``."""

    name = "duckdb"

    def connect(self, url: str, user: str | None, password: str | None) -> Any:
        import duckdb

        path = url[len("duckdb://"):] if url.startswith("duckdb://") else url
        if path.startswith("/") and path[1:] == ":memory:":
            path = ":memory:"
        return duckdb.connect(path or ":memory:")

    def cancel(self, conn: Any, cursor: Any) -> None:
        # DuckDB cursors are connections of their own
        cursor.interrupt()


DRIVERS: dict[str, type[QueryDriver]] = {
    PsycopgDriver.name: PsycopgDriver,
    DuckDBDriver.name: DuckDBDriver,
    # Accept the JDBC class name used by existing interpreter settings
    "org.postgresql.Driver": PsycopgDriver,
}


def get_driver(name: str) -> QueryDriver:
    if name not in DRIVERS:
        raise ConnectError(
            f"Unknown driver: {name!r}. Available: {', '.join(sorted(DRIVERS))}"
        )
    return DRIVERS[name]()
