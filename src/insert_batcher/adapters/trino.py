"""
Trino adapter for Insert Batcher.

Trino limits the size of a query string and has no RETURNING clause, so
inserts through this adapter are split by size and report no identifiers.
"""
import logging
from typing import Any, Optional, Tuple, Union

import trino

from insert_batcher.adapters.base import BackendAdapter, parse_version
from insert_batcher.config import DEFAULT_TRINO_MAX_QUERY_SIZE
from insert_batcher.models import RawStatementResult

logger = logging.getLogger(__name__)


class TrinoAdapter(BackendAdapter):
    """
    Adapter for Trino.

    Example:
        >>> adapter = TrinoAdapter(host="localhost", port=8080, catalog="hive")
        >>> Importer(adapter).insert_many(
        ...     "INSERT INTO users VALUES ",
        ...     ["(1, 'Alice')", "(2, 'Bob')"],
        ... )
    """

    supports_savepoints = False

    def __init__(
        self,
        host: Optional[str] = None,
        port: int = 8080,
        user: str = "admin",
        password: Optional[str] = None,
        catalog: str = "hive",
        schema: str = "default",
        http_scheme: str = "https",
        auth: Optional[Any] = None,
        max_query_size: int = DEFAULT_TRINO_MAX_QUERY_SIZE,
        verify: Union[bool, str] = True,
        connection: Optional[Any] = None,
    ):
        """
        Initialize a Trino adapter.

        Args:
            host: Trino server hostname or IP
            port: Trino server port
            user: Username for authentication
            password: Password for authentication (if required)
            catalog: Default catalog to use
            schema: Default schema to use
            http_scheme: HTTP scheme (http or https)
            auth: Authentication method (if not using password)
            max_query_size: Maximum query size in bytes (default: 1MB)
            verify: Whether to verify SSL certificates (True, False, or path to CA bundle)
            connection: Existing trino.dbapi connection to use instead of connecting
        """
        super().__init__()
        if connection is None and host is None:
            raise ValueError("Either connection or host must be provided")

        self.max_query_size = max_query_size
        self._connection = connection
        if self._connection is None:
            conn_params = {
                "host": host,
                "port": port,
                "user": user,
                "catalog": catalog,
                "schema": schema,
                "http_scheme": http_scheme,
                "verify": verify,
            }
            if password:
                conn_params["auth"] = trino.auth.BasicAuthentication(user, password)
            elif auth:
                conn_params["auth"] = auth

            self._connection = trino.dbapi.connect(**conn_params)
            logger.info(f"Connected to Trino server at {http_scheme}://{host}:{port}")
        self._cursor = self._connection.cursor()

    def execute(self, sql: str) -> RawStatementResult:
        """Execute a SQL statement on Trino, re-raising driver errors unchanged."""
        try:
            logger.debug(f"Executing Trino SQL: {sql[:200]}")
            self._cursor.execute(sql)
            # fetching drives the query to completion, INSERTs return a row count
            rows = self._cursor.fetchall()
            if self._cursor.description:
                columns = tuple(column[0] for column in self._cursor.description)
                return RawStatementResult(columns, tuple(tuple(row) for row in rows))
            return RawStatementResult()
        except Exception as e:
            logger.error(f"Error executing Trino SQL: {e}")
            raise

    def _probe_server_version(self) -> Tuple[int, int, int]:
        result = self.execute("SELECT version()")
        return parse_version(result.rows[0][0])

    def _probe_max_allowed_packet(self) -> int:
        return self.max_query_size

    def begin_transaction(self) -> None:
        """
        Begin a Trino transaction.

        Note: Trino only supports transactions on some connectors; on the
        others the server rejects the statement and the error is re-raised.
        """
        logger.debug("Beginning Trino transaction")
        self.execute("START TRANSACTION")

    def commit_transaction(self) -> None:
        """Commit the current Trino transaction."""
        logger.debug("Committing Trino transaction")
        self.execute("COMMIT")

    def rollback_transaction(self) -> None:
        """Rollback the current Trino transaction."""
        logger.debug("Rolling back Trino transaction")
        self.execute("ROLLBACK")

    def close(self) -> None:
        """Close the Trino connection."""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

        if self._connection is not None:
            self._connection.close()
            self._connection = None

        logger.debug("Closed Trino connection")
