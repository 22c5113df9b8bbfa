"""
Exceptions raised by Insert Batcher.

Driver errors raised while executing a statement are not wrapped here; they
propagate to the caller exactly as the database driver raised them.
"""
from typing import Optional, Sequence


class InsertBatcherError(Exception):
    """Base class for all Insert Batcher errors."""


class ValueSetTooLargeError(InsertBatcherError):
    """
    A single value tuple cannot fit in one statement, even on its own.

    Attributes:
        size: Bytes the value needs, including the reserved statement overhead
        max_bytes: The statement size limit that was exceeded
    """

    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(
            f"{size} bytes exceeds the max allowed for an insert [{max_bytes}]"
        )


class UnknownReturningColumnError(InsertBatcherError):
    """A requested returning column is missing from an executed statement's columns."""

    def __init__(self, column: str, columns: Sequence[str]):
        self.column = column
        self.columns = list(columns)
        super().__init__(
            f"Returning column {column!r} not found in result columns {self.columns}"
        )


class UnsupportedBackendError(InsertBatcherError):
    """The connection belongs to a database backend Insert Batcher does not know."""

    def __init__(self, backend: str, detail: Optional[str] = None):
        self.backend = backend
        message = f"Unsupported backend: {backend}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
