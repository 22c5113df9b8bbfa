#!/usr/bin/env python
"""
Command-line interface for Insert Batcher.

Value files hold one pre-rendered value tuple per line, for example
``(1,'Alice')``. Blank lines and lines starting with ``--`` are skipped.
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

from insert_batcher import __version__
from insert_batcher.adapters import PostgreSQLAdapter, SQLiteAdapter
from insert_batcher.config import DEFAULT_LOG_LEVEL, LOG_FILE, MAX_BYTES_ENVVAR, NO_MAX_PACKET, QUERY_OVERHEAD
from insert_batcher.exceptions import InsertBatcherError
from insert_batcher.executor import BatchExecutor
from insert_batcher.importer import Importer
from insert_batcher.models import PackingConfig, StatementTemplate
from insert_batcher.query_collector import ListQueryCollector

console = Console()
logger = logging.getLogger("insert_batcher")


def setup_logging(verbose: bool = False, log_file: Optional[str] = LOG_FILE) -> logging.Logger:
    """
    Set up logging for the command line tool.

    Args:
        verbose: Log at DEBUG level instead of the configured default
        log_file: Also write DEBUG logs to this file (optional)

    Returns:
        The package logger
    """
    level = logging.DEBUG if verbose else getattr(logging, DEFAULT_LOG_LEVEL, logging.INFO)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(file_handler)

    return logger


def read_values(file_path: str) -> List[str]:
    """
    Read pre-rendered value tuples from a file.

    Args:
        file_path: Path to the values file

    Returns:
        List of value tuples, in file order
    """
    values = []
    with open(Path(file_path), "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("--"):
                continue
            values.append(line)
    return values


def split_columns(columns: Optional[str]) -> List[str]:
    """Split a comma-separated column list, dropping blanks."""
    if not columns:
        return []
    return [column.strip() for column in columns.split(",") if column.strip()]


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Insert Batcher - bulk INSERTs that respect the server's statement size limit.

    Use 'plan' to see how a value file would be split into statements and
    'load' to insert it into a database.
    """
    pass


@cli.command()
@click.argument("values_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--base", required=True, help="SQL placed before the values, e.g. 'INSERT INTO t (a,b) VALUES '")
@click.option("--suffix", default="", help="SQL placed after the values")
@click.option("--max-bytes", default=NO_MAX_PACKET, type=int, envvar=MAX_BYTES_ENVVAR, show_envvar=True,
              help="Maximum statement size in bytes (0 means unlimited)")
@click.option("--overhead", default=QUERY_OVERHEAD, type=int,
              help=f"Bytes reserved per statement on top of its text (default: {QUERY_OVERHEAD})")
@click.option("--force-single", is_flag=True, help="Always plan a single statement")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the planned SQL to this file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def plan(values_file: str, base: str, suffix: str, max_bytes: int, overhead: int,
         force_single: bool, output: Optional[str], verbose: bool):
    """Show how VALUES_FILE would be split into INSERT statements, without executing them."""
    setup_logging(verbose)

    try:
        values = read_values(values_file)
        template = StatementTemplate.create(base, suffix)
        config = PackingConfig.for_template(template, max_bytes, overhead)

        collector = ListQueryCollector()
        executor = BatchExecutor(lambda sql: None, dry_run=True, query_collector=collector)
        outcome = executor.execute(template, values, config, force_single=force_single)
    except (InsertBatcherError, ValueError, OSError) as e:
        logger.error(f"Error planning inserts: {e}")
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    table = Table(title="Planned statements")
    table.add_column("#", justify="right")
    table.add_column("Values", justify="right")
    table.add_column("Bytes", justify="right")
    for query in collector.get_queries():
        table.add_row(
            str(query["metadata"]["statement_index"]),
            str(query["metadata"]["value_count"]),
            str(query["bytes"]),
        )
    console.print(table)

    stats = collector.get_stats()
    console.print(f"[bold]{len(values)} values in {outcome.statement_count} statements[/bold]")
    console.print(f"Largest statement: {stats['max_bytes']} bytes")

    if output:
        with open(output, "w", encoding="utf-8") as f:
            for i, query in enumerate(collector.get_queries()):
                f.write(f"-- Statement {i + 1}\n")
                f.write(query["query"])
                f.write(";\n\n")
        console.print(f"[bold green]✓[/bold green] Saved planned SQL to {output}")


@cli.command()
@click.argument("values_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--table", "table_name", required=True, help="Target table name")
@click.option("--columns", required=True, help="Comma-separated columns provided by each value tuple")
@click.option("--sqlite", "sqlite_path", type=click.Path(dir_okay=False), help="SQLite database file")
@click.option("--postgres-dsn", help="PostgreSQL connection string")
@click.option("--primary-key", help="Comma-separated identifier columns to return")
@click.option("--returning", help="Comma-separated extra columns to return")
@click.option("--max-bytes", type=int, help="Override the maximum statement size in bytes")
@click.option("--force-single", is_flag=True, help="Insert everything in a single statement")
@click.option("--ignore", is_flag=True, help="Skip rows that violate unique constraints")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def load(values_file: str, table_name: str, columns: str, sqlite_path: Optional[str],
         postgres_dsn: Optional[str], primary_key: Optional[str], returning: Optional[str],
         max_bytes: Optional[int], force_single: bool, ignore: bool, verbose: bool):
    """Insert the value tuples in VALUES_FILE into a table."""
    setup_logging(verbose)

    if bool(sqlite_path) == bool(postgres_dsn):
        console.print("[bold red]Error:[/bold red] Specify exactly one of --sqlite or --postgres-dsn")
        sys.exit(1)

    adapter_kwargs = {}
    if max_bytes is not None:
        adapter_kwargs["max_query_size"] = max_bytes

    adapter = None
    try:
        if sqlite_path:
            adapter = SQLiteAdapter(database=sqlite_path, **adapter_kwargs)
        else:
            adapter = PostgreSQLAdapter(connection_params={"dsn": postgres_dsn}, **adapter_kwargs)

        result = Importer(adapter).import_values(
            table_name,
            split_columns(columns),
            read_values(values_file),
            ignore=ignore,
            force_single_insert=force_single,
            primary_key=split_columns(primary_key),
            returning=split_columns(returning),
        )
    except Exception as e:
        logger.error(f"Error loading values: {e}", exc_info=verbose)
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)
    finally:
        if adapter is not None:
            adapter.close()

    console.print(f"[bold green]✓[/bold green] Executed {result.statement_count} statements")
    if result.identifiers:
        console.print(f"Identifiers: {list(result.identifiers)}")
    if result.returned:
        console.print(f"Returned: {list(result.returned)}")


@cli.command()
def version():
    """Show version information."""
    console.print(f"Insert Batcher version: {__version__}")


# Export the CLI function as main for easy importing
main = cli

if __name__ == "__main__":
    cli()
