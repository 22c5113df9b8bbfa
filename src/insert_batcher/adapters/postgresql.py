"""
PostgreSQL adapter for Insert Batcher.

This module provides an adapter for PostgreSQL databases through psycopg2.
PostgreSQL has no packet size setting, so the statement size limit is a
configured practical maximum.
"""
import logging
from typing import Any, Dict, Optional, Tuple

import psycopg2
from psycopg2.extensions import (
    ISOLATION_LEVEL_READ_COMMITTED,
    ISOLATION_LEVEL_REPEATABLE_READ,
    ISOLATION_LEVEL_SERIALIZABLE,
    quote_ident,
)

from insert_batcher.adapters.base import BackendAdapter, parse_version
from insert_batcher.config import DEFAULT_POSTGRESQL_MAX_QUERY_SIZE, POSTGRESQL_RETURNING_MIN_VERSION
from insert_batcher.models import RawStatementResult

logger = logging.getLogger(__name__)

ISOLATION_LEVELS = {
    "read_committed": ISOLATION_LEVEL_READ_COMMITTED,
    "repeatable_read": ISOLATION_LEVEL_REPEATABLE_READ,
    "serializable": ISOLATION_LEVEL_SERIALIZABLE,
}


class PostgreSQLAdapter(BackendAdapter):
    """
    PostgreSQL adapter for Insert Batcher.

    Attributes:
        connection: PostgreSQL database connection
        cursor: Cursor used to execute statements
        max_query_size: Maximum statement size in bytes (default 500MB)
    """

    returning_min_version = POSTGRESQL_RETURNING_MIN_VERSION

    def __init__(
        self,
        connection_params: Optional[Dict[str, Any]] = None,
        connection: Optional[Any] = None,
        max_query_size: int = DEFAULT_POSTGRESQL_MAX_QUERY_SIZE,
        isolation_level: str = "read_committed",
        application_name: Optional[str] = "insert_batcher",
    ):
        """
        Initialize the PostgreSQL adapter.

        Args:
            connection_params: Dictionary of psycopg2 connection parameters
            connection: Existing psycopg2 connection to use (optional)
            max_query_size: Maximum statement size in bytes
            isolation_level: Transaction isolation level
                (read_committed, repeatable_read, serializable)
            application_name: Application name to set in PostgreSQL (for monitoring)

        Raises:
            ValueError: If both connection and connection_params are None, or
                the isolation level is unknown
        """
        super().__init__()

        if isolation_level not in ISOLATION_LEVELS:
            raise ValueError(
                f"Invalid isolation level: {isolation_level}. "
                f"Valid values are: {', '.join(ISOLATION_LEVELS.keys())}"
            )
        if connection is None and connection_params is None:
            raise ValueError("Either connection or connection_params must be provided")

        self.max_query_size = max_query_size
        self.isolation_level = ISOLATION_LEVELS[isolation_level]

        if connection is None:
            params = dict(connection_params)
            if application_name and "application_name" not in params:
                params["application_name"] = application_name
            self.connection = psycopg2.connect(**params)
            logger.info(f"Connected to PostgreSQL database {params.get('dbname', '')}")
        else:
            self.connection = connection
        self.connection.set_isolation_level(self.isolation_level)

        self.cursor = self.connection.cursor()

    def execute(self, sql: str) -> RawStatementResult:
        """
        Execute a SQL statement.

        Outside a transaction the statement is committed right away. Errors
        are logged and re-raised unchanged.
        """
        try:
            logger.debug(f"Executing PostgreSQL statement: {sql[:200]}")
            self.cursor.execute(sql)

            result = RawStatementResult()
            if self.cursor.description is not None:
                columns = tuple(column[0] for column in self.cursor.description)
                result = RawStatementResult(columns, tuple(tuple(row) for row in self.cursor.fetchall()))

            if not self.in_transaction:
                self.connection.commit()
            return result
        except Exception as e:
            logger.error(f"PostgreSQL error: {e}")
            if not self.in_transaction:
                self.connection.rollback()
            raise

    def _probe_server_version(self) -> Tuple[int, int, int]:
        result = self.execute("SHOW server_version")
        return parse_version(result.rows[0][0])

    def _probe_max_allowed_packet(self) -> int:
        return self.max_query_size

    def quote_column_name(self, name: str) -> str:
        return quote_ident(str(name), self.cursor)

    def begin_transaction(self) -> None:
        # psycopg2 opens the transaction implicitly with the first statement
        pass

    def commit_transaction(self) -> None:
        self.connection.commit()

    def rollback_transaction(self) -> None:
        self.connection.rollback()

    def close(self) -> None:
        """Close the cursor and the connection."""
        if self.cursor is not None:
            self.cursor.close()
            self.cursor = None
        if self.connection is not None:
            self.connection.close()
            self.connection = None
