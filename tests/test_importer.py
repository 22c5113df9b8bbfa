"""
Tests for the Importer, with a fake adapter and against SQLite.
"""
import sqlite3
import unittest

import pytest

from insert_batcher import Importer, ListQueryCollector
from insert_batcher.adapters import SQLiteAdapter
from insert_batcher.adapters.base import BackendAdapter
from insert_batcher.exceptions import UnknownReturningColumnError, ValueSetTooLargeError
from insert_batcher.models import RawStatementResult

HAS_SQLITE_RETURNING = sqlite3.sqlite_version_info >= (3, 35, 0)


class FakeAdapter(BackendAdapter):
    """Adapter returning canned results and recording statements."""

    returning_min_version = (8, 0, 26)

    def __init__(self, version=(8, 0, 30), packet=0, columns=("id", "name")):
        super().__init__()
        self.version = version
        self.packet = packet
        self.columns = columns
        self.statements = []
        self.transactions = 0

    def execute(self, sql):
        self.statements.append(sql)
        if " RETURNING " in sql:
            rows = tuple((i + 1, f"row{i + 1}") for i in range(sql.count("),(") + 1))
            return RawStatementResult(self.columns, rows)
        return RawStatementResult(values=(len(self.statements),))

    def _probe_server_version(self):
        return self.version

    def _probe_max_allowed_packet(self):
        return self.packet

    def quote_column_name(self, name):
        return f"`{name}`"

    def begin_transaction(self):
        self.transactions += 1

    def close(self):
        pass


class Model:
    column_names = ["id", "name"]


@pytest.mark.core
class TestImporter(unittest.TestCase):
    """Test cases for Importer with a fake adapter."""

    def setUp(self):
        self.values = ["('a')", "('b')", "('c')"]

    def test_returning_selections_quote_known_columns(self):
        importer = Importer(FakeAdapter())

        selections = importer.returning_selections({
            "primary_key": "id",
            "returning": ["name", "UPPER(name)"],
            "model": Model(),
        })

        self.assertEqual(selections, ["`id`", "`name`", "UPPER(name)"])

    def test_returning_selections_list_each_column_once(self):
        importer = Importer(FakeAdapter())

        selections = importer.returning_selections({
            "primary_key": "id",
            "returning": ["id", "name"],
            "model": Model(),
        })

        self.assertEqual(selections, ["`id`", "`name`"])

    def test_no_selections_when_returning_unsupported(self):
        importer = Importer(FakeAdapter(version=(8, 0, 25)))

        self.assertEqual(importer.returning_selections({"primary_key": "id", "model": Model()}), [])

    def test_single_statement_with_returning(self):
        adapter = FakeAdapter()

        result = Importer(adapter).insert_many(
            "INSERT INTO t (name) VALUES ", self.values,
            primary_key="id", returning="name", model=Model(),
        )

        self.assertEqual(adapter.statements, [
            "INSERT INTO t (name) VALUES ('a'),('b'),('c') RETURNING `id`, `name`"
        ])
        self.assertEqual(result.statement_count, 1)
        self.assertEqual(result.identifiers, (1, 2, 3))
        self.assertEqual(result.returned, ("row1", "row2", "row3"))

    def test_without_returning_uses_generic_values(self):
        adapter = FakeAdapter(version=(5, 7, 0))

        result = Importer(adapter).insert_many("INSERT INTO t (name) VALUES ", self.values, primary_key="id")

        self.assertEqual(adapter.statements, ["INSERT INTO t (name) VALUES ('a'),('b'),('c')"])
        self.assertEqual(result.identifiers, (1,))
        self.assertEqual(result.returned, ())

    def test_split_insert_drops_returning(self):
        # reserved 8 + 28 bytes of base; one value fits, two do not
        adapter = FakeAdapter(packet=45)

        result = Importer(adapter).insert_many(
            "INSERT INTO t (name) VALUES ", self.values, primary_key="id", returning="name"
        )

        self.assertEqual(adapter.statements, [
            "INSERT INTO t (name) VALUES ('a')",
            "INSERT INTO t (name) VALUES ('b')",
            "INSERT INTO t (name) VALUES ('c')",
        ])
        self.assertEqual(adapter.transactions, 1)
        self.assertEqual(result.statement_count, 3)
        self.assertEqual(result.identifiers, (1, 2, 3))
        self.assertEqual(result.returned, ())

    def test_force_single_insert(self):
        adapter = FakeAdapter(packet=45)

        result = Importer(adapter).insert_many(
            "INSERT INTO t (name) VALUES ", self.values, force_single_insert=True
        )

        self.assertEqual(result.statement_count, 1)
        self.assertEqual(adapter.transactions, 0)

    def test_sql_list_builds_suffix(self):
        adapter = FakeAdapter()

        Importer(adapter).insert_many(
            ["INSERT INTO t (name) VALUES ", " ON DUPLICATE KEY UPDATE", "name=VALUES(name)"],
            ["('a')"],
        )

        self.assertEqual(adapter.statements, [
            "INSERT INTO t (name) VALUES ('a') ON DUPLICATE KEY UPDATE name=VALUES(name)"
        ])

    def test_oversized_value(self):
        adapter = FakeAdapter(packet=45)

        with self.assertRaises(ValueSetTooLargeError):
            Importer(adapter).insert_many("INSERT INTO t (name) VALUES ", ["('a')", "('" + "b" * 50 + "')"])

        self.assertEqual(adapter.statements, [])

    def test_unknown_returning_column(self):
        adapter = FakeAdapter(columns=("id", "title"))

        with self.assertRaises(UnknownReturningColumnError):
            Importer(adapter).insert_many(
                "INSERT INTO t (name) VALUES ", self.values, primary_key="id", returning="name"
            )

    def test_insert_sql(self):
        importer = Importer(FakeAdapter())

        sql = importer.insert_sql("users", ["name", "score"], {})

        self.assertEqual(sql, "INSERT INTO `users` (`name`,`score`) VALUES ")

    def test_dry_run(self):
        adapter = FakeAdapter()
        collector = ListQueryCollector()

        result = Importer(adapter, dry_run=True, query_collector=collector).insert_many(
            "INSERT INTO t (name) VALUES ", self.values, primary_key="id", model=Model()
        )

        self.assertEqual(adapter.statements, [])
        self.assertEqual(result.statement_count, 1)
        self.assertEqual(result.identifiers, ())
        self.assertEqual(collector.get_queries()[0]["query"],
                         "INSERT INTO t (name) VALUES ('a'),('b'),('c') RETURNING `id`")


@pytest.mark.db
class TestImporterSQLite(unittest.TestCase):
    """Importer against an in-memory SQLite database."""

    def setUp(self):
        self.connection = sqlite3.connect(":memory:")
        self.connection.execute(
            "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT UNIQUE, score INTEGER)"
        )
        self.connection.commit()
        self.values = [f"('user{i}',{i})" for i in range(1, 7)]

    def tearDown(self):
        self.connection.close()

    def count_rows(self):
        return self.connection.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    @unittest.skipUnless(HAS_SQLITE_RETURNING, "SQLite without RETURNING support")
    def test_returning_identifiers(self):
        importer = Importer(SQLiteAdapter(connection=self.connection))

        result = importer.import_values(
            "users", ["name", "score"], self.values[:3], primary_key="id", returning="name"
        )

        self.assertEqual(result.statement_count, 1)
        self.assertEqual(result.identifiers, (1, 2, 3))
        self.assertEqual(result.returned, ("user1", "user2", "user3"))
        self.assertEqual(self.count_rows(), 3)

    def test_split_insert(self):
        # base is 44 bytes, 52 reserved; each value is 11 bytes so three fit per statement
        adapter = SQLiteAdapter(connection=self.connection, max_query_size=90)

        result = Importer(adapter).import_values("users", ["name", "score"], self.values)

        self.assertEqual(result.statement_count, 2)
        self.assertEqual(result.identifiers, (3, 6))
        self.assertEqual(self.count_rows(), 6)
        names = [row[0] for row in self.connection.execute("SELECT name FROM users ORDER BY id")]
        self.assertEqual(names, [f"user{i}" for i in range(1, 7)])

    def test_failed_group_rolls_back_everything(self):
        adapter = SQLiteAdapter(connection=self.connection, max_query_size=90)
        values = self.values[:5] + ["('user1',99)"]

        with self.assertRaises(sqlite3.IntegrityError):
            Importer(adapter).import_values("users", ["name", "score"], values)

        self.assertEqual(self.count_rows(), 0)

    def test_split_insert_inside_open_transaction(self):
        self.connection.execute("INSERT INTO users (name, score) VALUES ('caller', 0)")
        self.assertTrue(self.connection.in_transaction)
        adapter = SQLiteAdapter(connection=self.connection, max_query_size=90)

        result = Importer(adapter).import_values("users", ["name", "score"], self.values)

        self.assertEqual(result.statement_count, 2)
        self.assertEqual(self.count_rows(), 7)
        # the caller's transaction is left open for the caller to commit
        self.assertTrue(self.connection.in_transaction)
        self.connection.rollback()
        self.assertEqual(self.count_rows(), 0)

    def test_failed_split_insert_keeps_open_transaction(self):
        self.connection.execute("INSERT INTO users (name, score) VALUES ('caller', 0)")
        adapter = SQLiteAdapter(connection=self.connection, max_query_size=90)
        values = self.values[:5] + ["('user1',99)"]

        with self.assertRaises(sqlite3.IntegrityError):
            Importer(adapter).import_values("users", ["name", "score"], values)

        self.assertTrue(self.connection.in_transaction)
        names = [row[0] for row in self.connection.execute("SELECT name FROM users")]
        self.assertEqual(names, ["caller"])

    def test_ignore_skips_duplicates(self):
        adapter = SQLiteAdapter(connection=self.connection)
        values = ["('dup',1)", "('dup',2)", "('other',3)"]

        result = Importer(adapter).import_values("users", ["name", "score"], values, ignore=True)

        self.assertEqual(result.statement_count, 1)
        self.assertEqual(self.count_rows(), 2)


if __name__ == "__main__":
    unittest.main()
