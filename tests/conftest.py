import copy
import re

import asyncpg
import pytest
from fastapi.testclient import TestClient

from core import db
from main import app
from resources.descriptors import RESOURCES

_SELECT = re.compile(
    r"^SELECT (?P<cols>.+?) FROM (?P<table>\w+)"
    r"(?: WHERE (?P<where>.+?))?(?: ORDER BY (?P<order>.+))?$"
)
_INSERT = re.compile(r"^INSERT INTO (?P<table>\w+) \((?P<cols>.+?)\) VALUES \((?P<markers>.+?)\)$")
_UPDATE = re.compile(r"^UPDATE (?P<table>\w+) SET (?P<sets>.+) WHERE (?P<key>\w+) = \$(?P<pos>\d+)$")
_DELETE = re.compile(r"^DELETE FROM (?P<table>\w+)(?: WHERE (?P<where>.+))?$")


def _position(marker: str) -> int:
    marker = marker.strip()
    assert marker.startswith("$"), f"expected a $n marker, got {marker!r}"
    return int(marker[1:]) - 1


def _row_filter(where, args):
    if where is None:
        return lambda row: True

    eq = re.fullmatch(r"(\w+) = (\$\d+)", where)
    if eq:
        column, value = eq.group(1), args[_position(eq.group(2))]
        return lambda row: row[column] == value

    member = re.fullmatch(r"(\w+) IN \(([^)]*)\)", where)
    if member:
        column = member.group(1)
        values = {args[_position(m)] for m in member.group(2).split(",")}
        return lambda row: row[column] in values

    raise AssertionError(f"unsupported WHERE clause: {where!r}")


class _FakeTransaction:
    def __init__(self, conn):
        self.conn = conn
        self.snapshot = None

    async def __aenter__(self):
        self.snapshot = copy.deepcopy(self.conn.tables)
        self.conn.transactions += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.conn.tables.clear()
            self.conn.tables.update(self.snapshot)
            self.conn.rollbacks += 1
        return False


class FakeConnection:
    """
    In-memory stand-in for an asyncpg connection.

    Understands the statement shapes the resource repository builds, and
    keeps every statement it ran in `statements`.
    """

    def __init__(self):
        self.columns = {d.table: d.column_names for d in RESOURCES}
        self.serial = {d.table: d.generated[0] for d in RESOURCES if d.generated}
        self.tables = {table: [] for table in self.columns}
        self.next_id = {table: 1 for table in self.serial}
        self.statements = []
        self.transactions = 0
        self.rollbacks = 0
        self._fail_when = None
        self._failure = None

    def seed(self, table, *rows):
        for row in rows:
            full = {column: None for column in self.columns[table]}
            full.update(row)
            if table in self.serial:
                column = self.serial[table]
                if full[column] is None:
                    full[column] = self.next_id[table]
                self.next_id[table] = max(self.next_id[table], full[column] + 1)
            self.tables[table].append(full)

    def fail_when(self, predicate, error=None):
        self._fail_when = predicate
        self._failure = error or asyncpg.exceptions.UniqueViolationError("simulated statement failure")

    def transaction(self):
        return _FakeTransaction(self)

    def _record(self, sql, args):
        self.statements.append((sql, args))
        if self._fail_when is not None and self._fail_when(sql, args):
            raise self._failure

    async def fetch(self, sql, *args):
        self._record(sql, args)
        m = _SELECT.match(sql)
        assert m, f"unsupported query: {sql!r}"
        columns = [c.strip() for c in m.group("cols").split(",")]
        keep = _row_filter(m.group("where"), args)
        rows = [{c: row[c] for c in columns} for row in self.tables[m.group("table")] if keep(row)]
        if m.group("order"):
            ordering = [c.strip() for c in m.group("order").split(",")]
            rows.sort(key=lambda row: tuple(row[c] for c in ordering))
        return rows

    async def execute(self, sql, *args):
        self._record(sql, args)

        m = _INSERT.match(sql)
        if m:
            table = m.group("table")
            columns = [c.strip() for c in m.group("cols").split(",")]
            markers = m.group("markers").split(",")
            self.seed(table, {c: args[_position(p)] for c, p in zip(columns, markers)})
            return "INSERT 0 1"

        m = _UPDATE.match(sql)
        if m:
            table, key = m.group("table"), m.group("key")
            match_value = args[int(m.group("pos")) - 1]
            changes = {}
            for assignment in m.group("sets").split(","):
                column, marker = assignment.split("=")
                changes[column.strip()] = args[_position(marker)]
            hits = [row for row in self.tables[table] if row[key] == match_value]
            for row in hits:
                row.update(changes)
            return f"UPDATE {len(hits)}"

        m = _DELETE.match(sql)
        if m:
            table = m.group("table")
            keep = _row_filter(m.group("where"), args)
            before = len(self.tables[table])
            self.tables[table] = [row for row in self.tables[table] if not keep(row)]
            return f"DELETE {before - len(self.tables[table])}"

        raise AssertionError(f"unsupported statement: {sql!r}")


@pytest.fixture()
def fake_conn():
    return FakeConnection()


@pytest.fixture()
def client(fake_conn):
    async def _connection():
        yield fake_conn

    app.dependency_overrides[db.get_connection] = _connection
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class RecordingPool:
    """
    Pool stand-in that hands out one connection and counts acquire/release.
    """

    def __init__(self, conn):
        self.conn = conn
        self.acquired = 0
        self.released = 0

    async def acquire(self):
        self.acquired += 1
        return self.conn

    async def release(self, conn):
        assert conn is self.conn
        self.released += 1


@pytest.fixture()
def recording_pool(fake_conn, monkeypatch):
    pool = RecordingPool(fake_conn)
    monkeypatch.setattr(db, "_pool", pool)
    return pool
