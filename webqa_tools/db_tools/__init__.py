"""
================================================================================
Database Tools Module
================================================================================

Relational database helpers for test assertions: connections from explicit
parameters or the environment, queries as lists of dicts, updates, batches
and transactions.

Exports:
    - SqlClient: Connection-owning wrapper with context manager support
    - execute_query / execute_update / execute_batch / query_for_string
    - run_in_transaction: Commit-or-rollback around a callable
    - get_connection / get_connection_from_env / close_quietly

================================================================================
"""

from .sql_client import (
    AUTO_COMMIT_KEY,
    ConnectionParams,
    QueryResult,
    SqlClient,
    bind_positional,
    close_quietly,
    execute_batch,
    execute_query,
    execute_update,
    get_connection,
    get_connection_from_env,
    is_auto_commit,
    query_for_string,
    run_in_transaction,
    set_auto_commit,
)

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
