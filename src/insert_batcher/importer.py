"""
Bulk INSERT of pre-rendered value tuples through a backend adapter.

The Importer ties the pieces together: it asks the adapter for its limits
and capabilities, assembles and runs the statements with a BatchExecutor,
and reconciles their results into one BatchResult.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from insert_batcher.adapters.base import BackendAdapter
from insert_batcher.config import QUERY_OVERHEAD
from insert_batcher.executor import BatchExecutor
from insert_batcher.models import BatchResult, PackingConfig, ReturningRequest, StatementTemplate
from insert_batcher.query_collector import QueryCollector
from insert_batcher.results import ReconciliationMode, reconcile

logger = logging.getLogger(__name__)


class Importer:
    """
    Inserts large value sets in as few statements as the server allows.

    Recognized options for ``insert_many`` and ``import_values``:

    - ``ignore`` / ``on_duplicate_key_ignore``: add the backend's ignore modifier
      (``import_values`` only, ``insert_many`` takes the SQL as given)
    - ``force_single_insert``: always run a single statement
    - ``primary_key``: column name or list of names returned as identifiers
    - ``returning``: column name or list of names returned as values
    - ``model``: object whose ``column_names`` lists the table's columns; names
      found there are quoted in the RETURNING clause
    - ``column_names``: the same list, given directly

    Example:
        >>> importer = Importer(SQLiteAdapter(database=":memory:"))
        >>> result = importer.import_values(
        ...     "users", ["name"], ["('Alice')", "('Bob')"],
        ...     primary_key="id", column_names=["id", "name"],
        ... )
        >>> result.identifiers
        (1, 2)
    """

    def __init__(
        self,
        adapter: BackendAdapter,
        dry_run: bool = False,
        query_collector: Optional[QueryCollector] = None,
        query_overhead: int = QUERY_OVERHEAD,
    ):
        self.adapter = adapter
        self.dry_run = dry_run
        self.query_collector = query_collector
        self.query_overhead = query_overhead

    def insert_many(
        self,
        sql: Union[str, Sequence[str]],
        values: Sequence[str],
        **options: Any,
    ) -> BatchResult:
        """
        Insert pre-rendered value tuples.

        Args:
            sql: Base SQL, or a list whose first element is the base SQL and
                whose other elements are joined with spaces into the suffix
            values: Pre-rendered value tuples such as ``"(1,'a')"``
            **options: Import options, see the class docstring

        Returns:
            BatchResult with the statement count, identifiers and returned values

        Raises:
            ValueSetTooLargeError: If one value cannot fit in a statement
            UnknownReturningColumnError: If a requested column was not returned
        """
        template = StatementTemplate.from_sql(sql)
        config = PackingConfig.for_template(
            template, self.adapter.max_allowed_packet(), self.query_overhead
        )
        request = ReturningRequest.create(options.get("primary_key"), options.get("returning"))
        selections = self.returning_selections(options)

        executor = BatchExecutor(
            self.adapter.execute,
            self.adapter.transaction,
            dry_run=self.dry_run,
            query_collector=self.query_collector,
        )
        outcome = executor.execute(
            template,
            values,
            config,
            force_single=bool(options.get("force_single_insert")),
            returning_clause=", ".join(selections) or None,
        )

        mode = ReconciliationMode.select(request, outcome.returning_applied and not self.dry_run)
        result = reconcile(outcome.results, request, mode, outcome.statement_count)

        logger.info(
            f"Inserted {len(values)} values in {result.statement_count} statements "
            f"({mode.value} results)"
        )
        return result

    def import_values(
        self,
        table_name: str,
        column_names: Sequence[str],
        values: Sequence[str],
        post_sql: str = "",
        **options: Any,
    ) -> BatchResult:
        """
        Build the INSERT statement for a table and insert the values.

        Args:
            table_name: Target table, optionally schema-qualified
            column_names: Columns the value tuples provide, in order
            values: Pre-rendered value tuples
            post_sql: Text appended after the values (e.g. a conflict clause)
            **options: Import options, see the class docstring

        Returns:
            BatchResult from ``insert_many``
        """
        options.setdefault("column_names", list(column_names))
        return self.insert_many(
            [self.insert_sql(table_name, column_names, options), post_sql],
            values,
            **options,
        )

    def insert_sql(self, table_name: str, column_names: Sequence[str], options: Dict[str, Any]) -> str:
        """Return ``INSERT [modifiers] INTO table (columns) VALUES `` for the adapter."""
        parts = ["INSERT"] + self.adapter.pre_sql_statements(options)
        parts.append(f"INTO {self.adapter.quote_table_name(table_name)}")
        columns = ",".join(self.adapter.quote_column_name(name) for name in column_names)
        return " ".join(parts) + f" ({columns}) VALUES "

    def returning_selections(self, options: Dict[str, Any]) -> List[str]:
        """
        Columns for the RETURNING clause.

        Empty when the backend does not support RETURNING. Otherwise the
        primary key columns followed by the returning columns, each listed
        once; names that are known table columns are quoted, anything else
        (such as an expression) is used as given.
        """
        request = ReturningRequest.create(options.get("primary_key"), options.get("returning"))
        if request.is_empty() or not self.adapter.supports_returning():
            return []

        model = options.get("model")
        known_columns = set(options.get("column_names") or getattr(model, "column_names", None) or [])

        return [
            self.adapter.quote_column_name(column) if column in known_columns else column
            for column in request.selections
        ]
