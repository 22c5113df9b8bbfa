"""
Tests for the command-line interface.
"""
import importlib
import os
import sqlite3
import tempfile
import unittest
from unittest import mock

import pytest
from click.testing import CliRunner

from insert_batcher import config
from insert_batcher.cli import cli, read_values, split_columns


@pytest.mark.core
class TestHelpers(unittest.TestCase):
    """Test cases for CLI helper functions."""

    def test_read_values_skips_blanks_and_comments(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "values.sql")
            with open(path, "w", encoding="utf-8") as f:
                f.write("-- users\n(1,'a')\n\n  (2,'b')  \n")

            self.assertEqual(read_values(path), ["(1,'a')", "(2,'b')"])

    def test_split_columns(self):
        self.assertEqual(split_columns("id, name,,score "), ["id", "name", "score"])
        self.assertEqual(split_columns(None), [])


class TestCommands(unittest.TestCase):
    """Test cases for the plan and load commands."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.values_file = os.path.join(self.tmp.name, "values.sql")
        with open(self.values_file, "w", encoding="utf-8") as f:
            f.write("('a',1)\n('b',2)\n('c',3)\n")

    def tearDown(self):
        self.tmp.cleanup()

    def test_plan_splits_statements(self):
        output = os.path.join(self.tmp.name, "plan.sql")

        result = self.runner.invoke(cli, [
            "plan", self.values_file,
            "--base", "INSERT INTO t VALUES ",
            "--max-bytes", "40",
            "--output", output,
        ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("3 values in 3 statements", result.output)
        with open(output, encoding="utf-8") as f:
            sql = f.read()
        self.assertIn("-- Statement 1\nINSERT INTO t VALUES ('a',1);", sql)
        self.assertIn("-- Statement 3\nINSERT INTO t VALUES ('c',3);", sql)

    def test_plan_unlimited(self):
        result = self.runner.invoke(cli, ["plan", self.values_file, "--base", "INSERT INTO t VALUES ", "--max-bytes", "0"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("3 values in 1 statements", result.output)

    def test_plan_max_bytes_from_environment(self):
        result = self.runner.invoke(
            cli,
            ["plan", self.values_file, "--base", "INSERT INTO t VALUES "],
            env={"INSERT_BATCHER_MAX_BYTES": "40"},
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("3 values in 3 statements", result.output)

    def test_plan_rejects_non_numeric_max_bytes_from_environment(self):
        result = self.runner.invoke(
            cli,
            ["plan", self.values_file, "--base", "INSERT INTO t VALUES "],
            env={"INSERT_BATCHER_MAX_BYTES": "lots"},
        )

        self.assertEqual(result.exit_code, 2)
        self.assertIn("Invalid value", result.output)

    def test_config_imports_with_non_numeric_max_bytes(self):
        with mock.patch.dict(os.environ, {"INSERT_BATCHER_MAX_BYTES": "lots"}):
            reloaded = importlib.reload(config)

        self.assertEqual(reloaded.MAX_BYTES_ENVVAR, "INSERT_BATCHER_MAX_BYTES")

    def test_plan_value_too_large(self):
        result = self.runner.invoke(cli, ["plan", self.values_file, "--base", "INSERT INTO t VALUES ", "--max-bytes", "20"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("exceeds the max allowed", result.output)

    @pytest.mark.db
    def test_load_into_sqlite(self):
        database = os.path.join(self.tmp.name, "test.db")
        connection = sqlite3.connect(database)
        connection.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT, score INTEGER)")
        connection.commit()
        connection.close()

        # 48 reserved bytes plus 7 per value: two values fit in 64 bytes, three do not
        result = self.runner.invoke(cli, [
            "load", self.values_file,
            "--table", "t",
            "--columns", "name,score",
            "--sqlite", database,
            "--max-bytes", "64",
        ])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Executed 2 statements", result.output)

        connection = sqlite3.connect(database)
        count = connection.execute("SELECT COUNT(*) FROM t").fetchone()[0]
        connection.close()
        self.assertEqual(count, 3)

    def test_load_requires_one_database(self):
        result = self.runner.invoke(cli, ["load", self.values_file, "--table", "t", "--columns", "name,score"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("--sqlite or --postgres-dsn", result.output)

    def test_version(self):
        result = self.runner.invoke(cli, ["version"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Insert Batcher version", result.output)


if __name__ == "__main__":
    unittest.main()
