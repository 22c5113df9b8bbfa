"""
Turn per-statement results into one BatchResult.

Two modes exist. ``COLUMNAR`` is used when the statement carried a RETURNING
clause: identifier columns and the remaining returned columns are picked out
of each row by name. ``GENERIC`` is used otherwise, and simply collects the
insert metadata each statement reported (for example the last insert id).
"""
import enum
import logging
from typing import Any, List, Optional, Sequence

from insert_batcher.exceptions import UnknownReturningColumnError
from insert_batcher.models import BatchResult, RawStatementResult, ReturningRequest

logger = logging.getLogger(__name__)


class ReconciliationMode(enum.Enum):
    """How statement results are turned into identifiers and returned values."""
    COLUMNAR = "columnar"
    GENERIC = "generic"

    @classmethod
    def select(cls, request: ReturningRequest, returning_applied: bool) -> "ReconciliationMode":
        """Columnar only when columns were requested and a RETURNING clause actually ran."""
        if returning_applied and not request.is_empty():
            return cls.COLUMNAR
        return cls.GENERIC


def reconcile(
    raw_results: Sequence[RawStatementResult],
    request: ReturningRequest,
    mode: Optional[ReconciliationMode] = None,
    statement_count: Optional[int] = None,
) -> BatchResult:
    """
    Combine the results of every executed statement, keeping their order.

    Args:
        raw_results: One result per executed statement, in execution order
        request: Identifier and extra columns the caller asked for
        mode: Reconciliation mode; columnar when omitted and ``request`` is
            not empty
        statement_count: Number of statements executed (defaults to the
            number of results)

    Returns:
        BatchResult with identifiers and returned values

    Raises:
        UnknownReturningColumnError: If a requested column is missing from a
            statement's result columns
    """
    if mode is None:
        mode = ReconciliationMode.select(request, returning_applied=True)
    if statement_count is None:
        statement_count = len(raw_results)

    if mode is ReconciliationMode.GENERIC:
        identifiers: List[Any] = []
        for result in raw_results:
            identifiers.extend(result.values)
        return BatchResult(statement_count, tuple(identifiers), ())

    identifiers = []
    returned: List[Any] = []
    returned_width = 0

    for result in raw_results:
        columns = list(result.columns)
        id_indexes = [_column_index(columns, column) for column in request.identifier_columns]
        for column in request.extra_columns:
            _column_index(columns, column)
        returning_indexes = [index for index in range(len(columns)) if index not in id_indexes]
        returned_width = len(returning_indexes)

        for row in result.rows:
            if id_indexes:
                identifiers.append(tuple(row[index] for index in id_indexes))
            if returning_indexes:
                returned.append(tuple(row[index] for index in returning_indexes))

    if len(request.identifier_columns) == 1:
        identifiers = [entry[0] for entry in identifiers]
    if returned_width == 1:
        returned = [entry[0] for entry in returned]

    logger.debug(
        f"Reconciled {len(identifiers)} identifiers and {len(returned)} returned "
        f"values from {len(raw_results)} results"
    )
    return BatchResult(statement_count, tuple(identifiers), tuple(returned))


def _column_index(columns: List[str], column: str) -> int:
    try:
        return columns.index(column)
    except ValueError:
        raise UnknownReturningColumnError(column, columns) from None
