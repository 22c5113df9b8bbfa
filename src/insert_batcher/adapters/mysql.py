"""
MySQL adapter for Insert Batcher.

This module works with any DB-API 2.0 MySQL driver (PyMySQL, mysqlclient,
mysql-connector). The server is asked for ``max_allowed_packet`` and its
version; both answers are cached for the life of the adapter.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from insert_batcher.adapters.base import parse_version
from insert_batcher.adapters.generic import GenericAdapter
from insert_batcher.config import MYSQL_RETURNING_MIN_VERSION, NO_MAX_PACKET

logger = logging.getLogger(__name__)


class MySQLAdapter(GenericAdapter):
    """
    Adapter for MySQL servers.

    Example:
        >>> import pymysql
        >>> conn = pymysql.connect(host="localhost", user="root", database="test")
        >>> adapter = MySQLAdapter(conn)
        >>> adapter.max_allowed_packet()
        67108864
    """

    returning_min_version = MYSQL_RETURNING_MIN_VERSION

    def __init__(
        self,
        connection: Any,
        create_cursor_fn: Optional[Callable] = None,
        auto_commit: bool = True,
    ):
        """
        Initialize the MySQL adapter.

        Args:
            connection: A DB-API connection from a MySQL driver
            create_cursor_fn: Optional function to create a cursor (defaults to connection.cursor())
            auto_commit: Whether to commit after each statement run outside a transaction
        """
        super().__init__(
            connection=connection,
            create_cursor_fn=create_cursor_fn,
            max_query_size=NO_MAX_PACKET,
            auto_commit=auto_commit,
        )

    def _probe_max_allowed_packet(self) -> int:
        result = self.execute("SELECT @@max_allowed_packet")
        return int(result.rows[0][0])

    def _probe_server_version(self) -> Tuple[int, int, int]:
        result = self.execute("SELECT VERSION()")
        return parse_version(result.rows[0][0])

    def quote_column_name(self, name: str) -> str:
        return "`" + str(name).replace("`", "``") + "`"

    def pre_sql_statements(self, options: Dict[str, Any]) -> List[str]:
        if options.get("ignore") or options.get("on_duplicate_key_ignore"):
            return ["IGNORE"]
        return []

    def begin_transaction(self) -> None:
        self._get_cursor().execute("START TRANSACTION")
