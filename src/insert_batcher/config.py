"""
Configuration settings for Insert Batcher.

Defaults used throughout the package. A few of them can be overridden with
environment variables so that the command line tool picks them up.
"""
import os

# Bytes a statement needs on the wire beyond its own text (measured on MySQL)
QUERY_OVERHEAD = 8

# A maximum statement size of 0 means the server imposes no limit
NO_MAX_PACKET = 0

# Default maximum statement sizes for backends without a size probe
DEFAULT_GENERIC_MAX_QUERY_SIZE = 500_000
DEFAULT_POSTGRESQL_MAX_QUERY_SIZE = 500_000_000  # practical limit for PostgreSQL
DEFAULT_TRINO_MAX_QUERY_SIZE = 1_000_000

# First server versions accepting INSERT ... RETURNING
MYSQL_RETURNING_MIN_VERSION = (8, 0, 26)
POSTGRESQL_RETURNING_MIN_VERSION = (8, 2, 0)
SQLITE_RETURNING_MIN_VERSION = (3, 35, 0)

# Name prefix for savepoints opened by nested transactions
SAVEPOINT_PREFIX = "insert_batcher_sp"

# Command line defaults; the max bytes variable is read by the --max-bytes option
MAX_BYTES_ENVVAR = "INSERT_BATCHER_MAX_BYTES"
DEFAULT_LOG_LEVEL = os.environ.get("INSERT_BATCHER_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("INSERT_BATCHER_LOG_FILE") or None
