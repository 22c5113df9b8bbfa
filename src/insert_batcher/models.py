"""
Value types shared by the partitioner, executor and result reconciliation.
"""
from typing import Any, List, NamedTuple, Sequence, Tuple

from insert_batcher.config import NO_MAX_PACKET, QUERY_OVERHEAD


def byte_size(value: Any) -> int:
    """Return the size of a pre-rendered value (or SQL fragment) in bytes."""
    if isinstance(value, (bytes, bytearray)):
        return len(value)
    return len(value.encode("utf-8"))


class StatementTemplate(NamedTuple):
    """Text placed before and after the comma-joined values of an INSERT."""

    base: str
    suffix: str = ""

    @classmethod
    def from_sql(cls, sql: Any) -> "StatementTemplate":
        """
        Build a template from a SQL string or a list of SQL fragments.

        When given a list, the first element is the base and every following
        element is appended to the suffix, separated by spaces.
        """
        if isinstance(sql, str):
            return cls.create(sql)
        parts = list(sql)
        if not parts:
            raise ValueError("SQL template cannot be empty")
        return cls.create(parts[0], " ".join(parts[1:]))

    @classmethod
    def create(cls, base: str, suffix: str = "") -> "StatementTemplate":
        if not base:
            raise ValueError("Statement base SQL cannot be empty")
        return cls(base, suffix or "")

    @property
    def size(self) -> int:
        return byte_size(self.base) + byte_size(self.suffix)


class PackingConfig(NamedTuple):
    """
    Byte budget for one statement.

    Attributes:
        reserved_overhead_bytes: Bytes every statement needs besides its values
        max_bytes: Maximum statement size; ``NO_MAX_PACKET`` (0) means unlimited
    """

    reserved_overhead_bytes: int
    max_bytes: int = NO_MAX_PACKET

    @classmethod
    def create(cls, reserved_overhead_bytes: int, max_bytes: int = NO_MAX_PACKET) -> "PackingConfig":
        if reserved_overhead_bytes < 0:
            raise ValueError(f"reserved_overhead_bytes must be >= 0, got {reserved_overhead_bytes}")
        if max_bytes < 0:
            raise ValueError(f"max_bytes must be >= 0, got {max_bytes}")
        return cls(reserved_overhead_bytes, max_bytes)

    @classmethod
    def for_template(
        cls,
        template: StatementTemplate,
        max_bytes: int,
        query_overhead: int = QUERY_OVERHEAD,
    ) -> "PackingConfig":
        """Reserve the template text plus the per-query overhead."""
        return cls.create(query_overhead + template.size, max_bytes)

    @property
    def unlimited(self) -> bool:
        return self.max_bytes == NO_MAX_PACKET


class ReturningRequest(NamedTuple):
    """Columns the caller wants back from the inserted rows."""

    identifier_columns: Tuple[str, ...] = ()
    extra_columns: Tuple[str, ...] = ()

    @classmethod
    def create(cls, identifier_columns: Any = None, extra_columns: Any = None) -> "ReturningRequest":
        return cls(_as_column_tuple(identifier_columns), _as_column_tuple(extra_columns))

    def is_empty(self) -> bool:
        return not self.identifier_columns and not self.extra_columns

    @property
    def selections(self) -> List[str]:
        """Identifier columns followed by extra columns, without duplicates."""
        seen = []
        for column in self.identifier_columns + self.extra_columns:
            if column not in seen:
                seen.append(column)
        return seen


class RawStatementResult(NamedTuple):
    """
    What executing one statement produced.

    Attributes:
        columns: Column names of the returned rows
        rows: Returned rows, each aligned with ``columns``
        values: Generic insert metadata (such as the last insert id) for
            backends or statements without a RETURNING clause
    """

    columns: Tuple[str, ...] = ()
    rows: Tuple[Tuple[Any, ...], ...] = ()
    values: Tuple[Any, ...] = ()


class BatchResult(NamedTuple):
    """Outcome of inserting a full value set, across every statement executed."""

    statement_count: int
    identifiers: Tuple[Any, ...] = ()
    returned: Tuple[Any, ...] = ()


def _as_column_tuple(columns: Any) -> Tuple[str, ...]:
    if not columns:
        return ()
    if isinstance(columns, str):
        return (columns,)
    return tuple(str(column) for column in columns)
