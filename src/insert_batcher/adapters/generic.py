"""
Generic adapter for Insert Batcher.

This module provides an adapter that works with any database driver that
follows the Python DB-API 2.0 specification.
"""
import logging
from typing import Any, Callable, Optional, Tuple

from insert_batcher.adapters.base import BackendAdapter
from insert_batcher.config import DEFAULT_GENERIC_MAX_QUERY_SIZE, SAVEPOINT_PREFIX
from insert_batcher.models import RawStatementResult

logger = logging.getLogger(__name__)


class GenericAdapter(BackendAdapter):
    """
    Adapter for any DB-API compatible database.

    The generic adapter cannot ask the server for its limits, so the maximum
    statement size and the server version are passed in.

    Example:
        >>> import sqlite3
        >>> from insert_batcher import Importer
        >>> from insert_batcher.adapters.generic import GenericAdapter
        >>>
        >>> conn = sqlite3.connect(":memory:")
        >>> adapter = GenericAdapter(connection=conn, max_query_size=100_000)
        >>> adapter.execute("CREATE TABLE users (id INTEGER, name TEXT)")
        >>> Importer(adapter).insert_many(
        ...     "INSERT INTO users (id, name) VALUES ",
        ...     ["(1,'Alice')", "(2,'Bob')"],
        ... )
    """

    def __init__(
        self,
        connection: Any,
        create_cursor_fn: Optional[Callable] = None,
        max_query_size: int = DEFAULT_GENERIC_MAX_QUERY_SIZE,
        auto_commit: bool = True,
        server_version: Tuple[int, int, int] = (0, 0, 0),
        returning_min_version: Optional[Tuple[int, int, int]] = None,
    ):
        """
        Initialize a generic DB-API adapter.

        Args:
            connection: A DB-API compatible connection object
            create_cursor_fn: Optional function to create a cursor (defaults to connection.cursor())
            max_query_size: Maximum statement size in bytes
            auto_commit: Whether to commit after each statement run outside a transaction
            server_version: Version reported by ``server_version()``
            returning_min_version: First version accepting RETURNING, None if never
        """
        super().__init__()
        self.connection = connection
        self.create_cursor_fn = create_cursor_fn or (lambda conn: conn.cursor())
        self.max_query_size = max_query_size
        self.auto_commit = auto_commit
        self._version = tuple(server_version)
        if returning_min_version is not None:
            self.returning_min_version = tuple(returning_min_version)
        self._cursor = None
        self._outer_savepoint = None

        logger.debug(f"Initialized {type(self).__name__} with max_query_size={max_query_size}")

    def _get_cursor(self) -> Any:
        """Get a cursor, creating it if necessary."""
        if self._cursor is None:
            self._cursor = self.create_cursor_fn(self.connection)
        return self._cursor

    def execute(self, sql: str) -> RawStatementResult:
        """
        Execute a SQL statement using the DB-API connection.

        Driver errors are logged and re-raised unchanged.

        Args:
            sql: The SQL statement to execute

        Returns:
            RawStatementResult with the returned columns and rows, or with
            the last inserted row id when the statement returned no rows
        """
        cursor = self._get_cursor()

        try:
            logger.debug(f"Executing SQL: {sql[:200]}")
            cursor.execute(sql)

            if cursor.description:
                columns = tuple(column[0] for column in cursor.description)
                rows = tuple(tuple(row) for row in cursor.fetchall())
                result = RawStatementResult(columns, rows)
            else:
                last_id = getattr(cursor, "lastrowid", None)
                result = RawStatementResult(values=(last_id,) if last_id else ())

            if self.auto_commit and not self.in_transaction and hasattr(self.connection, "commit"):
                self.connection.commit()

            return result
        except Exception as e:
            logger.error(f"Error executing SQL: {e}")
            if self.auto_commit and not self.in_transaction and hasattr(self.connection, "rollback"):
                try:
                    self.connection.rollback()
                except Exception as rollback_error:
                    logger.warning(f"Rollback after failed statement also failed: {rollback_error}")
            raise

    def _probe_server_version(self) -> Tuple[int, int, int]:
        return self._version

    def _probe_max_allowed_packet(self) -> int:
        return self.max_query_size

    def close(self) -> None:
        """Close the cursor."""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

        logger.debug("Closed DB cursor")

    def begin_transaction(self) -> None:
        """
        Begin a database transaction.

        If the connection already has a transaction open (for example sqlite3
        after an uncommitted statement), a savepoint is opened inside it
        instead. Committing releases the savepoint and leaves the caller's
        transaction open.
        """
        if getattr(self.connection, "in_transaction", False) is True:
            self._outer_savepoint = f"{SAVEPOINT_PREFIX}_outer"
            logger.debug(f"Connection already in a transaction, using savepoint {self._outer_savepoint}")
            self._get_cursor().execute(f"SAVEPOINT {self._outer_savepoint}")
        elif hasattr(self.connection, "begin"):
            self.connection.begin()
        else:
            self._get_cursor().execute("BEGIN")

    def commit_transaction(self) -> None:
        """Commit the current database transaction."""
        if self._outer_savepoint:
            name, self._outer_savepoint = self._outer_savepoint, None
            self._get_cursor().execute(f"RELEASE SAVEPOINT {name}")
        elif hasattr(self.connection, "commit"):
            self.connection.commit()

    def rollback_transaction(self) -> None:
        """Rollback the current database transaction."""
        if self._outer_savepoint:
            name, self._outer_savepoint = self._outer_savepoint, None
            cursor = self._get_cursor()
            cursor.execute(f"ROLLBACK TO SAVEPOINT {name}")
            cursor.execute(f"RELEASE SAVEPOINT {name}")
        elif hasattr(self.connection, "rollback"):
            self.connection.rollback()
