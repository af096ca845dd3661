"""PostgreSQL interpreter: runs paragraph SQL and renders the result set."""

from __future__ import annotations

import logging
import threading
from typing import Any

from nbinterp.engine.completion import last_word, prefix_at
from nbinterp.engine.drivers import QueryDriver, get_driver
from nbinterp.engine.formatting import (
    TabularResult,
    format_table,
    format_text,
    format_update_count,
    is_explain,
)
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
from nbinterp.errors import root_cause_message

logger = logging.getLogger("nbinterp.psql")

POSTGRESQL_SERVER_DRIVER_NAME = "postgresql.driver.name"
POSTGRESQL_SERVER_URL = "postgresql.url"
POSTGRESQL_SERVER_USER = "postgresql.user"
POSTGRESQL_SERVER_PASSWORD = "postgresql.password"
POSTGRESQL_SERVER_MAX_RESULT = "postgresql.max.result"

DEFAULT_DRIVER_NAME = "psycopg"
DEFAULT_URL = "postgresql://localhost:5432/"
DEFAULT_USER = "postgres"
DEFAULT_PASSWORD = ""
DEFAULT_MAX_RESULT = 1000

SQL_KEYWORDS = sorted({
    "all", "alter", "and", "as", "asc", "begin", "between", "by", "case",
    "cast", "commit", "create", "cross", "delete", "desc", "distinct", "drop",
    "else", "end", "except", "exists", "explain", "false", "from", "full",
    "group", "having", "in", "index", "inner", "insert", "intersect", "into",
    "is", "join", "left", "like", "limit", "not", "null", "offset", "on", "or",
    "order", "outer", "right", "rollback", "schema", "select", "set", "table",
    "then", "true", "truncate", "union", "update", "using", "values", "view",
    "when", "where", "with",
})

_TABLE_NAMES_SQL = (
    "SELECT DISTINCT table_name FROM information_schema.tables "
    "WHERE table_schema NOT IN ('information_schema', 'pg_catalog')"
)


@register_interpreter
class PostgreSqlInterpreter(Interpreter):
    name = "psql"
    group = "postgresql"
    description = "PostgreSQL SQL interpreter"

    properties = [
        PropertySpec(POSTGRESQL_SERVER_DRIVER_NAME, DEFAULT_DRIVER_NAME, "DB-API driver (psycopg or duckdb)"),
        PropertySpec(POSTGRESQL_SERVER_URL, DEFAULT_URL, "The URL for PostgreSQL."),
        PropertySpec(POSTGRESQL_SERVER_USER, DEFAULT_USER, "The PostgreSQL user name"),
        PropertySpec(POSTGRESQL_SERVER_PASSWORD, DEFAULT_PASSWORD, "The PostgreSQL user password"),
        PropertySpec(POSTGRESQL_SERVER_MAX_RESULT, DEFAULT_MAX_RESULT, "Max number of rows to display"),
    ]

    def __init__(self, properties: dict[str, Any] | None = None) -> None:
        super().__init__(properties)
        self._conn: Any = None
        self._driver: QueryDriver | None = None
        self._current_cursor: Any = None
        self._cursor_lock = threading.Lock()
        self._table_names: list[str] | None = None

    # --- lifecycle ---

    def open(self) -> None:
        self.close()
        url = str(self.get_property(POSTGRESQL_SERVER_URL))
        logger.info("Open PostgreSQL connection to %s", url)
        try:
            driver = get_driver(str(self.get_property(POSTGRESQL_SERVER_DRIVER_NAME)))
            conn = driver.connect(
                url,
                self.get_property(POSTGRESQL_SERVER_USER),
                self.get_property(POSTGRESQL_SERVER_PASSWORD),
            )
        except Exception as e:
            logger.error("Cannot open connection to %s", url, exc_info=True)
            self.state = ConnectionState.CONNECT_FAILED
            self.connect_error = root_cause_message(e)
            return

        self._driver = driver
        self._conn = conn
        self.state = ConnectionState.CONNECTED
        self.connect_error = None

    def close(self) -> None:
        conn, self._conn = self._conn, None
        self._table_names = None
        self.state = ConnectionState.DISCONNECTED
        self.connect_error = None
        if conn is None:
            return
        try:
            conn.close()
            logger.info("PostgreSQL connection closed")
        except Exception:
            logger.error("Cannot close connection", exc_info=True)

    def get_connection(self) -> Any:
        """The open connection, opening it on first use."""
        if self._conn is None and self.state is ConnectionState.DISCONNECTED:
            self.open()
        return self._conn

    def _max_result(self) -> int:
        try:
            return int(self.get_property(POSTGRESQL_SERVER_MAX_RESULT))
        except (TypeError, ValueError):
            return DEFAULT_MAX_RESULT

    # --- interpret / cancel ---

    def interpret(self, text: str, context: InterpreterContext | None) -> InterpreterResult:
        sql = (text or "").strip()
        if self.state is ConnectionState.CONNECT_FAILED:
            return InterpreterResult.error(self.connect_error or "Connection failed")
        if not sql:
            return InterpreterResult(Code.SUCCESS, "", ResultType.TEXT)

        conn = self.get_connection()
        if conn is None:
            return InterpreterResult.error(self.connect_error or "Not connected")

        logger.info("Run SQL command '%s'", sql)
        try:
            cursor = conn.cursor()
        except Exception as e:
            # Connection is gone; the next paragraph reopens it
            logger.error("Cannot create statement", exc_info=True)
            message = root_cause_message(e)
            self.close()
            return InterpreterResult.error(message)
        with self._cursor_lock:
            self._current_cursor = cursor
        try:
            cursor.execute(sql)
            if cursor.description is None:
                return InterpreterResult(Code.SUCCESS, format_update_count(max(cursor.rowcount, 0)), ResultType.TABLE)

            table = TabularResult.from_cursor(cursor, self._max_result())
            if is_explain(sql):
                return InterpreterResult(Code.SUCCESS, format_text(table), ResultType.TEXT)
            return InterpreterResult(Code.SUCCESS, format_table(table), ResultType.TABLE)
        except Exception as e:
            logger.error("Cannot run %s", sql, exc_info=True)
            return InterpreterResult.error(root_cause_message(e))
        finally:
            with self._cursor_lock:
                self._current_cursor = None
            try:
                cursor.close()
            except Exception:
                logger.error("Cannot close statement", exc_info=True)

    def cancel(self, context: InterpreterContext | None) -> None:
        """Interrupt the running statement. The connection stays open."""
        with self._cursor_lock:
            cursor = self._current_cursor
            if cursor is None or self._conn is None or self._driver is None:
                return
            logger.info("Cancel current query statement")
            try:
                self._driver.cancel(self._conn, cursor)
            except Exception:
                logger.error("Cannot cancel statement", exc_info=True)

    # --- completion ---

    def _load_table_names(self) -> list[str]:
        conn = self.get_connection()
        if conn is None:
            return []
        cursor = None
        try:
            cursor = conn.cursor()
            cursor.execute(_TABLE_NAMES_SQL)
            return sorted({str(r[0]) for r in cursor.fetchall()})
        except Exception as e:
            logger.warning("Cannot load table names for completion: %s", root_cause_message(e))
            return []
        finally:
            if cursor is not None:
                cursor.close()

    def completion(self, buffer: str, cursor: int) -> list[str] | None:
        word = last_word(prefix_at(buffer, cursor))
        if not word:
            return None
        if self._table_names is None:
            self._table_names = self._load_table_names()
        needle = word.lower()
        return [c for c in SQL_KEYWORDS + self._table_names if c.lower().startswith(needle) and c.lower() != needle]
