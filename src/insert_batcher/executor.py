"""
Statement assembly and execution for a set of insert values.

This module contains the BatchExecutor class, which turns a statement
template and a list of pre-rendered value tuples into as few INSERT
statements as the statement size limit allows, and runs them.
"""
import contextlib
import logging
from typing import Any, Callable, ContextManager, List, NamedTuple, Optional, Sequence

from insert_batcher.models import PackingConfig, RawStatementResult, StatementTemplate
from insert_batcher.partitioner import partition_value_sets, total_statement_bytes
from insert_batcher.query_collector import QueryCollector

logger = logging.getLogger(__name__)


class ExecutionOutcome(NamedTuple):
    """Statement count and per-statement results of one executor run."""

    statement_count: int
    results: List[RawStatementResult]
    returning_applied: bool = False


def build_statement(
    template: StatementTemplate,
    values: Sequence[str],
    returning_clause: Optional[str] = None,
) -> str:
    """
    Assemble one INSERT statement.

    Args:
        template: Base and suffix SQL text
        values: Pre-rendered value tuples, joined with commas
        returning_clause: Column list for a RETURNING clause (optional)

    Returns:
        The complete SQL statement
    """
    sql = template.base + ",".join(values) + template.suffix
    if returning_clause:
        sql += f" RETURNING {returning_clause}"
    return sql


class BatchExecutor:
    """
    Executes value sets as size-limited INSERT statements.

    When all values fit in one statement (or the size limit is disabled, or a
    single statement is forced) one statement is run, with the RETURNING
    clause if one was given. Otherwise the values are partitioned and every
    group runs inside one shared transaction, so that either all of them are
    inserted or none are.

    Attributes:
        execute_callback: Function executing one SQL statement
        transaction: Function returning a transaction context manager; it is
            called with ``requires_new=True``
        dry_run: If True, collect statements instead of executing them
        query_collector: Collector receiving statements in dry run mode

    Examples:
        >>> executor = BatchExecutor(adapter.execute, adapter.transaction)
        >>> outcome = executor.execute(
        ...     StatementTemplate("INSERT INTO users (id,name) VALUES "),
        ...     ["(1,'Alice')", "(2,'Bob')"],
        ...     PackingConfig(reserved_overhead_bytes=50, max_bytes=1_000_000),
        ... )
        >>> outcome.statement_count
        1
    """

    def __init__(
        self,
        execute_callback: Callable[[str], Any],
        transaction: Optional[Callable[..., ContextManager[Any]]] = None,
        dry_run: bool = False,
        query_collector: Optional[QueryCollector] = None,
    ):
        self.execute_callback = execute_callback
        self.transaction = transaction
        self.dry_run = dry_run
        self.query_collector = query_collector

        logger.debug(f"Initialized BatchExecutor with dry_run={dry_run}")

    def execute(
        self,
        template: StatementTemplate,
        values: Sequence[str],
        config: PackingConfig,
        force_single: bool = False,
        returning_clause: Optional[str] = None,
    ) -> ExecutionOutcome:
        """
        Insert every value, in as few statements as the size limit allows.

        Args:
            template: Base and suffix SQL text
            values: Pre-rendered value tuples, in insert order
            config: Reserved overhead and maximum statement size
            force_single: Run one statement even if it exceeds the limit
            returning_clause: Column list for a RETURNING clause, only used
                when a single statement is run

        Returns:
            ExecutionOutcome with the statement count and per-statement results

        Raises:
            ValueError: If the template base or the value list is empty
            ValueSetTooLargeError: If a value cannot fit in any statement
        """
        if not template.base:
            raise ValueError("Statement base SQL cannot be empty")
        if not values:
            raise ValueError("No values to insert")

        # the RETURNING clause is not counted: a statement that fits without it
        # keeps it even when the clause takes it past max_bytes
        total_bytes = total_statement_bytes(values, config.reserved_overhead_bytes)

        if config.unlimited or total_bytes <= config.max_bytes or force_single:
            logger.debug(
                f"Inserting {len(values)} values in a single statement "
                f"({total_bytes} bytes, max_bytes={config.max_bytes})"
            )
            sql = build_statement(template, values, returning_clause)
            result = self._run(sql, len(values), statement_index=1)
            return ExecutionOutcome(1, [result], bool(returning_clause))

        # partition before opening the transaction so oversized values fail early
        value_sets = partition_value_sets(
            values, config.reserved_overhead_bytes, config.max_bytes
        )

        if returning_clause:
            logger.warning(
                f"Insert split into {len(value_sets)} statements; "
                f"RETURNING {returning_clause} is only applied to single statements"
            )

        logger.info(
            f"Inserting {len(values)} values ({total_bytes} bytes) "
            f"in {len(value_sets)} statements (max_bytes={config.max_bytes})"
        )

        results: List[RawStatementResult] = []
        with self._transaction_scope():
            for index, value_set in enumerate(value_sets, start=1):
                sql = build_statement(template, value_set)
                results.append(self._run(sql, len(value_set), statement_index=index))

        return ExecutionOutcome(len(results), results, False)

    def _transaction_scope(self) -> ContextManager[Any]:
        if self.dry_run or self.transaction is None:
            return contextlib.nullcontext()
        return self.transaction(requires_new=True)

    def _run(self, sql: str, value_count: int, statement_index: int) -> RawStatementResult:
        metadata = {"statement_index": statement_index, "value_count": value_count}

        if self.dry_run:
            if self.query_collector:
                self.query_collector.add_query(sql, metadata)
            else:
                logger.debug(f"Dry run: would execute statement {statement_index} ({value_count} values)")
            return RawStatementResult()

        logger.debug(f"Executing statement {statement_index} with {value_count} values")
        result = self.execute_callback(sql)
        if self.query_collector:
            self.query_collector.add_query(sql, metadata)
        if result is None:
            return RawStatementResult()
        return result
