"""
Unit test fixtures - no external dependencies needed.
"""
import os

os.environ.setdefault("JWT_SECRET", "unit-test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import threading

import pytest
from unittest.mock import Mock
from datetime import datetime, timezone

from app.database import StoreError


class InMemoryStore:
    """Dict-backed stand-in for FirestoreStore that records every call."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self.calls: list[tuple] = []
        self.fail_on: dict[tuple[str, str], StoreError] = {}
        self._lock = threading.Lock()

    def add(self, collection: str, row: dict) -> dict:
        self.collections.setdefault(collection, {})[row["id"]] = dict(row)
        return row

    def find_by_field(self, collection, field, value, order_by=None, descending=False, limit=None):
        self.calls.append(("find", collection, field, value))
        if (collection, str(value)) in self.fail_on:
            raise self.fail_on[(collection, str(value))]

        rows = [dict(r) for r in list(self.collections.get(collection, {}).values()) if r.get(field) == value]
        if order_by:
            rows.sort(key=lambda r: r[order_by], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, collection, row):
        self.calls.append(("insert", collection, row.get("id")))
        return dict(self.add(collection, dict(row)))

    def create(self, collection, key, row):
        self.calls.append(("create", collection, key))
        if (collection, key) in self.fail_on:
            raise self.fail_on[(collection, key)]
        with self._lock:
            docs = self.collections.setdefault(collection, {})
            if key in docs:
                raise StoreError(f"{collection} key already exists", status_code=409)
            docs[key] = dict(row)
        return dict(row)

    def delete(self, collection, key):
        self.calls.append(("delete", collection, key))
        self.collections.get(collection, {}).pop(key, None)

    def update_where(self, collection, field, value, changes):
        self.calls.append(("update", collection, field, value))
        for row in self.collections.get(collection, {}).values():
            if row.get(field) == value:
                row.update(changes)
                return dict(row)
        raise StoreError(f"No {collection} row where {field} matches", status_code=404)

    def writes(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in ("create", "insert", "update", "delete")]


@pytest.fixture
def mock_db():
    """Mock Firestore client for unit tests."""
    db = Mock()
    db.collection = Mock(return_value=Mock())
    return db


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def utc():
    def make(minute: int) -> datetime:
        return datetime(2026, 1, 8, 8, minute, tzinfo=timezone.utc)
    return make
