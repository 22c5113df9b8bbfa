"""
Insert Batcher - bulk INSERTs that respect the server's statement size limit

This package splits a large set of pre-rendered value tuples into as few
INSERT statements as the server's maximum packet size allows, runs them in
one transaction, and collects generated identifiers and RETURNING values
back in insert order.
"""

from insert_batcher.exceptions import (
    InsertBatcherError,
    UnknownReturningColumnError,
    UnsupportedBackendError,
    ValueSetTooLargeError,
)
from insert_batcher.executor import BatchExecutor, ExecutionOutcome, build_statement
from insert_batcher.importer import Importer
from insert_batcher.models import (
    BatchResult,
    PackingConfig,
    RawStatementResult,
    ReturningRequest,
    StatementTemplate,
)
from insert_batcher.partitioner import partition_value_sets, total_statement_bytes
from insert_batcher.query_collector import ListQueryCollector, QueryCollector
from insert_batcher.results import ReconciliationMode, reconcile

__version__ = "0.1.0"
__all__ = [
    "BatchExecutor",
    "BatchResult",
    "ExecutionOutcome",
    "Importer",
    "InsertBatcherError",
    "ListQueryCollector",
    "PackingConfig",
    "QueryCollector",
    "RawStatementResult",
    "ReconciliationMode",
    "ReturningRequest",
    "StatementTemplate",
    "UnknownReturningColumnError",
    "UnsupportedBackendError",
    "ValueSetTooLargeError",
    "build_statement",
    "partition_value_sets",
    "reconcile",
    "total_statement_bytes",
]
