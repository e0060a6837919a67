"""Shared fixtures: an in-memory store, a controllable clock and SQLite-backed local storage."""

import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studytracker.auth import UserIdentity
from studytracker.database import init_db
from studytracker.errors import PersistenceFailure
from studytracker.services.event_bus import SessionEvents
from studytracker.services.local_storage import LocalStorage
from studytracker.services.session_writer import SessionWriter


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float = 0, ms: int = 0):
        self.now += int(seconds * 1000) + ms


class FakeStore:
    """
    Mimics RestStore over plain lists of dicts. Records every write so tests
    can assert on exactly what would have gone over the wire.
    """

    def __init__(self, tables: dict | None = None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.calls: list[tuple] = []
        self.fail_next: int = 0
        self.before_write = None
        self._ids = itertools.count(1)

    def _maybe_fail(self, op: str, table: str):
        if self.before_write is not None and op in ("insert", "update"):
            hook, self.before_write = self.before_write, None
            hook()
        if self.fail_next > 0:
            self.fail_next -= 1
            raise PersistenceFailure(f"{op} on {table} failed: HTTP 503", status_code=503)

    @staticmethod
    def _matches(row: dict, filters: dict | None) -> bool:
        return all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())

    def select(self, table, filters=None, columns="*", query_string=None, order=None, limit=None):
        self.calls.append(("select", table, filters, query_string))
        self._maybe_fail("select", table)
        rows = [dict(r) for r in self.tables.get(table, []) if self._matches(r, filters)]
        return rows[:limit] if limit is not None else rows

    def insert(self, table, data):
        self.calls.append(("insert", table, dict(data)))
        self._maybe_fail("insert", table)
        row = {"id": f"{table}-{next(self._ids)}", **data}
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    def update(self, table, record_id, data, filters=None):
        self.calls.append(("update", table, str(record_id), dict(data), filters))
        self._maybe_fail("update", table)
        for row in self.tables.get(table, []):
            if str(row.get("id")) == str(record_id) and self._matches(row, filters):
                row.update(data)
                return dict(row)
        return {}

    def delete(self, table, record_id, filters=None):
        self.calls.append(("delete", table, str(record_id), filters))
        self._maybe_fail("delete", table)
        self.tables[table] = [
            r for r in self.tables.get(table, [])
            if not (str(r.get("id")) == str(record_id) and self._matches(r, filters))
        ]

    def count(self, table, filters=None, query_string=None):
        self.calls.append(("count", table, filters, query_string))
        self._maybe_fail("count", table)
        return sum(1 for r in self.tables.get(table, []) if self._matches(r, filters))

    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "update", "delete")]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def storage():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    return LocalStorage(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def events():
    return SessionEvents()


@pytest.fixture
def writer(store):
    return SessionWriter(store)


@pytest.fixture
def user():
    return UserIdentity(id="user-1", email="student@example.com")
