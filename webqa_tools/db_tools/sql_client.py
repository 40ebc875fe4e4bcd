"""
================================================================================
SQL Client and Query Helpers
================================================================================

This module provides relational database utilities for test automation,
typically used to cross-check what the UI persisted:
- Connection management (explicit or from DB_URL / DB_USER / DB_PASS)
- Queries materialized as lists of dicts
- Updates, batches, scalar lookups
- Transactions with guaranteed rollback and auto-commit restore

Key Features:
    - ``?`` placeholders bound positionally (1-indexed)
    - Per-call or caller-owned connections
    - Context manager for safe connection handling
    - Quiet close returning an ActionResult

Auto-commit:
    Every connection carries an auto-commit flag (default on). With it on,
    each helper call commits its own statement, or rolls it back on error.
    With it off, statements accumulate in the open transaction until the
    caller commits.

Usage:
    from webqa_tools.db_tools import SqlClient

    with SqlClient.from_env() as db:
        rows = db.query("SELECT name FROM users WHERE id = ?", 42)

Author: Automation Team
License: MIT
================================================================================
"""

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from webqa_tools.common import (
    ActionResult,
    DatabaseError,
    InvalidConfiguration,
)
from webqa_tools.report_tools.allure_utils import attach_query_result


T = TypeVar("T")

AUTO_COMMIT_KEY = "webqa_auto_commit"

QueryResult = List[Dict[str, Any]]


# ============================================================
# Data Models
# ============================================================

@dataclass
class ConnectionParams:
    """
    Everything needed to open a connection.

    ``url`` is a SQLAlchemy URL (``postgresql+psycopg2://host/db``,
    ``sqlite:///path.db``, ...). User and password override the URL's own.
    """
    url: str
    user: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ConnectionParams":
        """
        Read DB_URL, DB_USER and DB_PASS.

        Raises:
            InvalidConfiguration: DB_URL is missing or blank
        """
        url = os.getenv("DB_URL", "")
        if not url.strip():
            raise InvalidConfiguration("DB_URL is not set", action="connect")
        return cls(url=url, user=os.getenv("DB_USER"), password=os.getenv("DB_PASS"))


ConnectionTarget = Union[Connection, ConnectionParams, str]


# ============================================================
# Statement Preparation
# ============================================================

def bind_positional(sql: str, params: Sequence[Any]) -> Tuple[Any, Dict[str, Any]]:
    """
    Turn a ``?``-placeholder statement into a bound text() clause.

    Placeholders inside quoted literals and ``--`` / ``/* */`` comments are
    left alone. Colons are always literal.

    Raises:
        DatabaseError: placeholder count differs from the number of params
    """
    parts: List[str] = []
    count = 0
    i, n = 0, len(sql)
    while i < n:
        char = sql[i]
        if char in ("'", '"'):
            end = sql.find(char, i + 1)
            end = n if end == -1 else end + 1
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            end = n if end == -1 else end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
        elif char == "?":
            count += 1
            parts.append(f":p{count}")
            i += 1
            continue
        else:
            end = i + 1
        parts.append(sql[i:end].replace(":", "\\:"))
        i = end

    if count != len(params):
        raise DatabaseError(
            f"Statement has {count} placeholder(s) but {len(params)} parameter(s) were given",
            action="bind",
        )

    values = {f"p{index}": value for index, value in enumerate(params, start=1)}
    return text("".join(parts)), values


@contextmanager
def _database_errors(action: str, sql: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        message = str(e).splitlines()[0] if str(e) else repr(e)
        if sql:
            message = f"{message} (sql: {sql})"
        raise DatabaseError(message, action=action, cause=e) from e


# ============================================================
# Connections
# ============================================================

def _mask_url(url) -> str:
    return url.render_as_string(hide_password=True)


def get_connection(url: str, user: Optional[str] = None, password: Optional[str] = None) -> Connection:
    """
    Open a connection in auto-commit mode.

    Args:
        url: SQLAlchemy database URL
        user: Username (overrides the URL's)
        password: Password (overrides the URL's)

    Returns:
        Open connection; close it with ``close_quietly`` or ``SqlClient``

    Raises:
        InvalidConfiguration: url is blank
        DatabaseError: the URL is invalid or the database is unreachable
    """
    if not url or not str(url).strip():
        raise InvalidConfiguration("Database URL is blank", action="connect")

    with _database_errors("connect"):
        sa_url = make_url(url)
        if user is not None:
            sa_url = sa_url.set(username=user)
        if password is not None:
            sa_url = sa_url.set(password=password)
        engine = create_engine(sa_url, poolclass=NullPool)
        connection = engine.connect()

    connection.info[AUTO_COMMIT_KEY] = True
    logger.debug(f"Connected to database: {_mask_url(sa_url)}")
    return connection


def get_connection_from_env() -> Connection:
    """Open a connection from DB_URL, DB_USER and DB_PASS."""
    params = ConnectionParams.from_env()
    return get_connection(params.url, params.user, params.password)


def close_quietly(resource: Any) -> ActionResult:
    """
    Close a connection (disposing its engine) or any object with ``close()``.

    Never raises; a failure is logged and returned.
    """
    if resource is None:
        return ActionResult.success()
    try:
        resource.close()
        if isinstance(resource, Connection):
            resource.engine.dispose()
    except Exception as e:
        logger.warning(f"Failed to close {type(resource).__name__}: {e}")
        return ActionResult.failure(e)
    return ActionResult.success()


def is_auto_commit(connection: Connection) -> bool:
    return connection.info.get(AUTO_COMMIT_KEY, True)


def set_auto_commit(connection: Connection, enabled: bool) -> None:
    """
    Switch auto-commit mode. Turning it on commits any pending transaction.
    """
    if enabled and not is_auto_commit(connection) and connection.in_transaction():
        with _database_errors("commit"):
            connection.commit()
    connection.info[AUTO_COMMIT_KEY] = enabled


@contextmanager
def _open(target: ConnectionTarget) -> Iterator[Connection]:
    """Yield a connection: the caller's own, or a per-call one closed afterwards."""
    if isinstance(target, Connection):
        yield target
        return

    params = target if isinstance(target, ConnectionParams) else ConnectionParams(url=target)
    connection = get_connection(params.url, params.user, params.password)
    try:
        yield connection
    finally:
        close_quietly(connection)


@contextmanager
def _statement(connection: Connection, action: str, sql: str) -> Iterator[None]:
    """Commit after the block in auto-commit mode; roll back on failure."""
    try:
        with _database_errors(action, sql):
            yield
            if is_auto_commit(connection):
                connection.commit()
    except BaseException:
        if is_auto_commit(connection):
            _rollback_quietly(connection)
        raise


def _rollback_quietly(connection: Connection) -> None:
    try:
        connection.rollback()
    except Exception as e:
        logger.warning(f"Rollback failed: {e}")


# ============================================================
# Query Helpers
# ============================================================

def execute_query(target: ConnectionTarget, sql: str, *params: Any) -> QueryResult:
    """
    Run a query and materialize every row.

    Args:
        target: Open connection (reused, left open), or ConnectionParams /
            URL string (connection opened and closed for this call)
        sql: Statement with ``?`` placeholders
        *params: Positional parameter values

    Returns:
        One dict per row, column label -> value, in column order
    """
    statement, values = bind_positional(sql, params)
    logger.debug(f"Query: {sql} params={list(params)}")
    with _open(target) as connection:
        with _statement(connection, "query", sql):
            result = connection.execute(statement, values)
            rows = [dict(row._mapping) for row in result]

    logger.debug(f"Query returned {len(rows)} row(s)")
    return rows


def execute_update(target: ConnectionTarget, sql: str, *params: Any) -> int:
    """
    Run an INSERT/UPDATE/DELETE (or DDL).

    Returns:
        Number of affected rows (0 when the driver does not report one)
    """
    statement, values = bind_positional(sql, params)
    logger.debug(f"Update: {sql} params={list(params)}")
    with _open(target) as connection:
        with _statement(connection, "update", sql):
            result = connection.execute(statement, values)
            count = max(result.rowcount, 0)

    logger.debug(f"Update affected {count} row(s)")
    return count


def execute_batch(connection: Connection, sql: str, batch_params: Iterable[Sequence[Any]]) -> List[int]:
    """
    Run one statement per parameter set.

    In auto-commit mode the whole batch is committed once at the end, or
    rolled back as a unit on failure.

    Returns:
        Affected-row count per parameter set
    """
    prepared = [bind_positional(sql, params) for params in batch_params]
    counts: List[int] = []
    with _statement(connection, "batch", sql):
        for statement, values in prepared:
            result = connection.execute(statement, values)
            counts.append(max(result.rowcount, 0))

    logger.debug(f"Batch of {len(counts)} statement(s) executed")
    return counts


def query_for_string(connection: ConnectionTarget, sql: str, *params: Any) -> Optional[str]:
    """
    First column of the first row as a string.

    Returns:
        None when there are no rows or the value is NULL
    """
    rows = execute_query(connection, sql, *params)
    if not rows:
        return None
    value = next(iter(rows[0].values()), None)
    return None if value is None else str(value)


def run_in_transaction(connection: Connection, action: Callable[[Connection], T]) -> T:
    """
    Run ``action(connection)`` as one transaction.

    Auto-commit is switched off for the duration and restored afterwards on
    every path. On any failure, including ``BaseException`` subclasses such as
    ``KeyboardInterrupt`` or pytest outcomes, the transaction is rolled back
    (a failing rollback is only logged) and the original exception is
    re-raised unchanged. A failing commit surfaces as ``DatabaseError``.
    """
    previous = is_auto_commit(connection)
    connection.info[AUTO_COMMIT_KEY] = False
    try:
        result = action(connection)
        with _database_errors("commit"):
            connection.commit()
        return result
    except BaseException:
        _rollback_quietly(connection)
        raise
    finally:
        connection.info[AUTO_COMMIT_KEY] = previous


# ============================================================
# SQL Client
# ============================================================

class SqlClient:
    """
    Connection-owning wrapper around the query helpers.

    Usage:
        with SqlClient("sqlite:///app.db") as db:
            db.update("INSERT INTO users (name) VALUES (?)", "alice")
            assert db.scalar("SELECT COUNT(*) FROM users") == "1"
    """

    def __init__(self, url: str, user: Optional[str] = None, password: Optional[str] = None):
        self.params = ConnectionParams(url=url, user=user, password=password)
        self._connection: Optional[Connection] = None

    @classmethod
    def from_env(cls) -> "SqlClient":
        params = ConnectionParams.from_env()
        return cls(params.url, params.user, params.password)

    @property
    def connection(self) -> Connection:
        """The open connection, connecting on first use."""
        if self._connection is None:
            self.connect()
        return self._connection

    def connect(self) -> "SqlClient":
        """
        Opens the connection.

        Returns:
            Self for method chaining.
        """
        if self._connection is None:
            self._connection = get_connection(self.params.url, self.params.user, self.params.password)
        return self

    def close(self) -> ActionResult:
        connection, self._connection = self._connection, None
        return close_quietly(connection)

    def query(self, sql: str, *params: Any, attach: bool = False) -> QueryResult:
        """
        Run a query; ``attach=True`` also attaches the rows to the Allure report.
        """
        rows = execute_query(self.connection, sql, *params)
        if attach:
            attach_query_result(sql, rows)
        return rows

    def update(self, sql: str, *params: Any) -> int:
        return execute_update(self.connection, sql, *params)

    def batch(self, sql: str, batch_params: Iterable[Sequence[Any]]) -> List[int]:
        return execute_batch(self.connection, sql, batch_params)

    def scalar(self, sql: str, *params: Any) -> Optional[str]:
        return query_for_string(self.connection, sql, *params)

    def transaction(self, action: Callable[[Connection], T]) -> T:
        return run_in_transaction(self.connection, action)

    def __enter__(self) -> "SqlClient":
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "AUTO_COMMIT_KEY",
    "ConnectionParams",
    "QueryResult",
    "SqlClient",
    "bind_positional",
    "close_quietly",
    "execute_batch",
    "execute_query",
    "execute_update",
    "get_connection",
    "get_connection_from_env",
    "is_auto_commit",
    "query_for_string",
    "run_in_transaction",
    "set_auto_commit",
]
