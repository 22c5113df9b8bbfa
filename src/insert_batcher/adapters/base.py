"""
Base adapter interface for Insert Batcher.

This module defines the abstract base class every backend adapter
implements. An adapter executes statements, runs transactions and answers
the capability questions the importer asks: which server version is
running, whether it accepts INSERT ... RETURNING, and how large one
statement may be.
"""
import contextlib
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from insert_batcher.config import NO_MAX_PACKET, SAVEPOINT_PREFIX
from insert_batcher.models import RawStatementResult

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(version: str) -> Tuple[int, int, int]:
    """
    Parse a server version string into a (major, minor, patch) triple.

    Trailing text such as ``-log``, ``-MariaDB`` or a distribution suffix is
    ignored; missing parts count as 0.

    Examples:
        >>> parse_version("8.0.26-log")
        (8, 0, 26)
        >>> parse_version("14.2 (Debian 14.2-1.pgdg110+1)")
        (14, 2, 0)
    """
    match = VERSION_PATTERN.search(str(version))
    if not match:
        return (0, 0, 0)
    return tuple(int(part) if part else 0 for part in match.groups())


class BackendAdapter(ABC):
    """
    Abstract base class for Insert Batcher adapters.

    Subclasses implement ``execute``, ``server_version`` and ``close``. The
    maximum statement size is probed once through ``_probe_max_allowed_packet``
    and cached until ``reset`` is called, typically after reconnecting. The
    cached value is not refreshed if the server setting changes while the
    connection stays open.

    Attributes:
        returning_min_version: First server version accepting RETURNING, or
            None if the backend never does
        supports_savepoints: Whether nested transactions may use savepoints
    """

    returning_min_version: Optional[Tuple[int, int, int]] = None
    supports_savepoints = True

    def __init__(self) -> None:
        self._max_allowed_packet: Optional[int] = None
        self._server_version: Optional[Tuple[int, int, int]] = None
        self._in_transaction = False
        self._savepoint_depth = 0

    @abstractmethod
    def execute(self, sql: str) -> RawStatementResult:
        """
        Execute a SQL statement.

        Args:
            sql: SQL statement to execute

        Returns:
            Columns and rows the statement returned, plus generic insert
            metadata such as the last insert id
        """
        pass

    @abstractmethod
    def _probe_server_version(self) -> Tuple[int, int, int]:
        """Query the server for its version."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""
        pass

    def _probe_max_allowed_packet(self) -> int:
        """
        Query the server for its maximum statement size.

        Backends without such a setting return ``NO_MAX_PACKET``.
        """
        return NO_MAX_PACKET

    def max_allowed_packet(self) -> int:
        """Maximum statement size in bytes, probed on first use and cached."""
        if self._max_allowed_packet is None:
            self._max_allowed_packet = int(self._probe_max_allowed_packet())
            logger.debug(f"{type(self).__name__} max statement size: {self._max_allowed_packet} bytes")
        return self._max_allowed_packet

    def server_version(self) -> Tuple[int, int, int]:
        """Server version as (major, minor, patch), probed on first use and cached."""
        if self._server_version is None:
            self._server_version = self._probe_server_version()
            logger.debug(f"{type(self).__name__} server version: {self._server_version}")
        return self._server_version

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def supports_returning(self) -> bool:
        """Whether INSERT statements may end with a RETURNING clause."""
        if self.returning_min_version is None:
            return False
        return self.server_version() >= self.returning_min_version

    def reset(self) -> None:
        """Forget cached server settings, e.g. after the connection was re-established."""
        self._max_allowed_packet = None
        self._server_version = None

    def quote_column_name(self, name: str) -> str:
        """Quote a column name for use in SQL."""
        return '"' + str(name).replace('"', '""') + '"'

    def quote_table_name(self, name: str) -> str:
        """Quote a possibly schema-qualified table name."""
        return ".".join(self.quote_column_name(part) for part in str(name).split("."))

    def pre_sql_statements(self, options: Dict[str, Any]) -> List[str]:
        """
        Modifiers placed between ``INSERT`` and ``INTO``.

        Args:
            options: Import options

        Returns:
            List of SQL tokens, empty by default
        """
        return []

    def begin_transaction(self) -> None:
        """
        Begin a transaction.

        Implementations may override this method if they support transactions.
        By default, this method does nothing.
        """
        pass

    def commit_transaction(self) -> None:
        """
        Commit the current transaction.

        Implementations may override this method if they support transactions.
        By default, this method does nothing.
        """
        pass

    def rollback_transaction(self) -> None:
        """
        Rollback the current transaction.

        Implementations may override this method if they support transactions.
        By default, this method does nothing.
        """
        pass

    @contextlib.contextmanager
    def transaction(self, requires_new: bool = False) -> Iterator["BackendAdapter"]:
        """
        Run a block inside a transaction.

        The transaction commits when the block exits normally and rolls back
        when it raises; the exception is re-raised unchanged. Inside an open
        transaction, ``requires_new`` opens a savepoint so that only the
        nested block is rolled back; without it the block joins the outer
        transaction.

        Args:
            requires_new: Open a savepoint when a transaction is already open
        """
        if self._in_transaction:
            if not requires_new or not self.supports_savepoints:
                yield self
                return
            self._savepoint_depth += 1
            name = f"{SAVEPOINT_PREFIX}_{self._savepoint_depth}"
            self.execute(f"SAVEPOINT {name}")
            try:
                yield self
            except Exception:
                logger.info(f"Rolling back to savepoint {name}")
                self.execute(f"ROLLBACK TO SAVEPOINT {name}")
                raise
            else:
                self.execute(f"RELEASE SAVEPOINT {name}")
            finally:
                self._savepoint_depth -= 1
            return

        self._in_transaction = True
        try:
            self.begin_transaction()
        except Exception:
            self._in_transaction = False
            raise
        try:
            yield self
        except Exception:
            logger.info("Rolling back transaction due to error")
            self._in_transaction = False
            self.rollback_transaction()
            raise
        else:
            self._in_transaction = False
            self.commit_transaction()
