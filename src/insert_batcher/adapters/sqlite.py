"""
SQLite adapter for Insert Batcher, built on the standard library sqlite3 driver.
"""
import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from insert_batcher.adapters.base import parse_version
from insert_batcher.adapters.generic import GenericAdapter
from insert_batcher.config import SQLITE_RETURNING_MIN_VERSION

logger = logging.getLogger(__name__)

# SQLITE_MAX_SQL_LENGTH compile-time default
SQLITE_MAX_SQL_LENGTH = 1_000_000_000


class SQLiteAdapter(GenericAdapter):
    """
    Adapter for SQLite databases.

    RETURNING is available from SQLite 3.35.0; ``INSERT OR IGNORE`` is used
    when the ``ignore`` option is set.

    Example:
        >>> adapter = SQLiteAdapter(database=":memory:")
        >>> adapter.supports_returning()
        True
    """

    returning_min_version = SQLITE_RETURNING_MIN_VERSION

    def __init__(
        self,
        connection: Optional[sqlite3.Connection] = None,
        database: Optional[str] = None,
        max_query_size: int = SQLITE_MAX_SQL_LENGTH,
        auto_commit: bool = True,
    ):
        """
        Initialize the SQLite adapter.

        Args:
            connection: Existing sqlite3 connection to use (optional)
            database: Path of the database file to open when no connection is given
            max_query_size: Maximum statement size in bytes
            auto_commit: Whether to commit after each statement run outside a transaction

        Raises:
            ValueError: If both connection and database are None
        """
        if connection is None and database is None:
            raise ValueError("Either connection or database must be provided")
        if connection is None:
            connection = sqlite3.connect(database)
            logger.info(f"Opened SQLite database {database}")

        super().__init__(
            connection=connection,
            max_query_size=max_query_size,
            auto_commit=auto_commit,
        )

    def _probe_server_version(self) -> Tuple[int, int, int]:
        result = self.execute("SELECT sqlite_version()")
        return parse_version(result.rows[0][0])

    def pre_sql_statements(self, options: Dict[str, Any]) -> List[str]:
        if options.get("ignore") or options.get("on_duplicate_key_ignore"):
            return ["OR IGNORE"]
        return []

    def close(self) -> None:
        """Close the cursor and the connection."""
        super().close()
        self.connection.close()
