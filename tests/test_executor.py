from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

import psycopg
import pytest

from sqlsynth.db import executor as executor_module
from sqlsynth.db.executor import (
    INT8_ARRAY_OID,
    INT8_OID,
    PostgresQueryExecutor,
    QueryExecutionError,
    QueryResult,
    to_transport_value,
)


@pytest.mark.parametrize(
    ("value", "type_oid", "expected"),
    [
        (None, None, None),
        (True, None, True),
        (42, 23, 42),
        (9007199254740993, INT8_OID, "9007199254740993"),
        (1.5, None, 1.5),
        ("text", None, "text"),
        (datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc), None, "2024-05-01T12:30:00+00:00"),
        (date(2024, 5, 1), None, "2024-05-01"),
        (b"\x00\xff", None, "00ff"),
        (memoryview(b"\x10"), None, "10"),
        (Decimal("12.50"), None, "12.50"),
        (UUID("12345678-1234-5678-1234-567812345678"), None, "12345678-1234-5678-1234-567812345678"),
        ([2**62, 1], INT8_ARRAY_OID, ["4611686018427387904", "1"]),
        ([2**62, 1], INT8_OID, ["4611686018427387904", "1"]),
        ([1, 2], 1007, [1, 2]),
        ({"at": date(2024, 1, 2)}, None, {"at": "2024-01-02"}),
    ],
)
def test_to_transport_value(value, type_oid, expected):
    assert to_transport_value(value, type_oid) == expected


@pytest.mark.parametrize("sql", ["", "   ", "SELECT 1; SELECT 2", "SELECT (1"])
def test_rejected_sql_never_opens_a_connection(monkeypatch, sql):
    def fail_connect(*args, **kwargs):
        raise AssertionError("connection attempted")

    monkeypatch.setattr(executor_module, "connect_readonly", fail_connect)

    with pytest.raises(QueryExecutionError):
        PostgresQueryExecutor("postgresql://localhost/db").execute(sql)


def test_query_result_serializes_like_driver_result():
    result = QueryResult(rows=[{"id": 1}], row_count=1, fields=[{"name": "id", "type_oid": 23}])

    assert result.to_dict() == {
        "rows": [{"id": 1}],
        "rowCount": 1,
        "fields": [{"name": "id", "type_oid": 23}],
    }


class FakeColumn:
    def __init__(self, name, type_code):
        self.name = name
        self.type_code = type_code


class FakeCursor:
    def __init__(self, description=None, rows=(), rowcount=-1, error=None):
        self.description = description
        self.rows = list(rows)
        self.rowcount = rowcount
        self.error = error
        self.executed = []

    def execute(self, sql):
        self.executed.append(sql)
        if self.error is not None:
            raise self.error

    def fetchmany(self, size):
        return self.rows[:size]

    def fetchall(self):
        return list(self.rows)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


def _install(monkeypatch, cursor):
    seen = []

    @contextmanager
    def fake_connect(dsn):
        seen.append(dsn)
        yield FakeConnection(cursor)

    monkeypatch.setattr(executor_module, "connect_readonly", fake_connect)
    return seen


def test_execute_returns_rows_and_fields(monkeypatch):
    cursor = FakeCursor(
        description=[FakeColumn("id", INT8_OID), FakeColumn("email", 25)],
        rows=[(1, "a@example.com"), (2, "b@example.com")],
        rowcount=2,
    )
    seen = _install(monkeypatch, cursor)

    result = PostgresQueryExecutor("postgresql://localhost/db").execute("SELECT id, email FROM users")

    assert seen == ["postgresql://localhost/db"]
    assert cursor.executed == ["SELECT id, email FROM users"]
    assert result.to_dict() == {
        "rows": [
            {"id": "1", "email": "a@example.com"},
            {"id": "2", "email": "b@example.com"},
        ],
        "rowCount": 2,
        "fields": [{"name": "id", "type_oid": INT8_OID}, {"name": "email", "type_oid": 25}],
    }


def test_execute_caps_fetched_rows(monkeypatch):
    cursor = FakeCursor(
        description=[FakeColumn("n", 23)],
        rows=[(1,), (2,), (3,)],
        rowcount=3,
    )
    _install(monkeypatch, cursor)

    result = PostgresQueryExecutor("postgresql://localhost/db", max_rows=2).execute(
        "SELECT n FROM numbers"
    )

    assert result.rows == [{"n": 1}, {"n": 2}]
    assert result.row_count == 3


def test_statement_without_result_set(monkeypatch):
    _install(monkeypatch, FakeCursor(description=None, rowcount=1))

    result = PostgresQueryExecutor("postgresql://localhost/db").execute(
        "UPDATE users SET email = 'x' WHERE id = 1"
    )

    assert result.to_dict() == {"rows": [], "rowCount": 1, "fields": []}


def test_database_errors_become_execution_errors(monkeypatch):
    _install(monkeypatch, FakeCursor(error=psycopg.Error("relation \"userz\" does not exist")))

    with pytest.raises(QueryExecutionError, match="Query failed: relation"):
        PostgresQueryExecutor("postgresql://localhost/db").execute("SELECT * FROM userz")
