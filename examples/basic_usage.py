#!/usr/bin/env python
"""
Basic usage example for Insert Batcher

This example inserts rows into an in-memory SQLite database with a small
statement size limit, so the insert is split across several statements
that run in one transaction.
"""
import logging

from insert_batcher import Importer, ListQueryCollector
from insert_batcher.adapters import SQLiteAdapter


# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Run the basic Insert Batcher example."""
    adapter = SQLiteAdapter(database=":memory:", max_query_size=200)
    adapter.execute("CREATE TABLE example_table (id INTEGER PRIMARY KEY, label TEXT, created TEXT)")

    values = [f"('Value {i}', '2023-01-{i:02d}')" for i in range(1, 11)]

    # Show the plan first
    collector = ListQueryCollector()
    Importer(adapter, dry_run=True, query_collector=collector).import_values(
        "example_table", ["label", "created"], values
    )
    for query in collector.get_queries():
        logger.info(f"Would execute ({query['bytes']} bytes): {query['query']}")

    # Then insert for real
    result = Importer(adapter).import_values("example_table", ["label", "created"], values)
    logger.info(f"Inserted {len(values)} rows in {result.statement_count} statements")
    logger.info(f"Last row id of each statement: {list(result.identifiers)}")

    adapter.close()


if __name__ == "__main__":
    main()
