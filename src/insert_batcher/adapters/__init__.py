"""
Insert Batcher adapters for specific database engines.

``adapter_for_connection`` picks the adapter matching a DB-API connection's
driver once, when the adapter is built.
"""
import logging
from typing import Any

from insert_batcher.adapters.base import BackendAdapter, parse_version
from insert_batcher.adapters.generic import GenericAdapter
from insert_batcher.adapters.mysql import MySQLAdapter
from insert_batcher.adapters.postgresql import PostgreSQLAdapter
from insert_batcher.adapters.sqlite import SQLiteAdapter
from insert_batcher.adapters.trino import TrinoAdapter
from insert_batcher.exceptions import UnsupportedBackendError

logger = logging.getLogger(__name__)

# top-level driver module -> adapter class
DRIVER_ADAPTERS = {
    "sqlite3": SQLiteAdapter,
    "pymysql": MySQLAdapter,
    "MySQLdb": MySQLAdapter,
    "mysql": MySQLAdapter,
    "psycopg2": PostgreSQLAdapter,
    "trino": TrinoAdapter,
}


def adapter_for_connection(connection: Any, **kwargs: Any) -> BackendAdapter:
    """
    Build the adapter matching a DB-API connection's driver.

    Args:
        connection: Open DB-API connection
        **kwargs: Extra arguments for the adapter

    Returns:
        Adapter wrapping ``connection``

    Raises:
        UnsupportedBackendError: If the driver is not recognized
    """
    module = type(connection).__module__ or ""
    driver = module.split(".")[0]
    adapter_class = DRIVER_ADAPTERS.get(driver)
    if adapter_class is None:
        raise UnsupportedBackendError(
            driver or type(connection).__name__,
            f"connection type {module}.{type(connection).__name__}",
        )

    logger.debug(f"Using {adapter_class.__name__} for {driver} connection")
    return adapter_class(connection=connection, **kwargs)


__all__ = [
    "BackendAdapter",
    "GenericAdapter",
    "MySQLAdapter",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
    "TrinoAdapter",
    "adapter_for_connection",
    "parse_version",
]
