"""Pytest configuration and fixtures for the API tests."""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import itertools
import uuid
from collections.abc import Generator
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.testclient import TestClient

from app.core.dependencies import get_optional_user, security
from app.core.errors import ConflictError, NotFoundError
from app.database.resource_store import get_resource_store
from app.main import app
from app.modules.auth.service import clear_auth_cache

# Composite unique constraints of the real schema
UNIQUE_KEYS = {
    "idea_votes": ("idea_id", "user_id"),
    "post_votes": ("post_id", "user_id"),
    "feature_request_votes": ("feature_request_id", "user_id"),
    "idea_assignments": ("idea_id", "user_id"),
}

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


class InMemoryResourceStore:
    """Dict-backed stand-in for ResourceStore with the same method surface."""

    def __init__(self):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._clock = itertools.count(1)

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(table, {})

    def _now(self) -> str:
        return (BASE_TIME + timedelta(seconds=next(self._clock))).isoformat()

    @staticmethod
    def _matches(row: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
        return all(row.get(column) == value for column, value in (filters or {}).items())

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._table(table).values()]

    # Reads

    def get(self, table: str, id: str, not_found: str = "Not found") -> Dict[str, Any]:
        row = self._table(table).get(id)
        if row is None:
            raise NotFoundError(not_found)
        return dict(row)

    def find_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for row in self._table(table).values():
            if self._matches(row, filters):
                return dict(row)
        return None

    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
        in_: Optional[Dict[str, Iterable[Any]]] = None,
        search: Optional[Tuple[List[str], str]] = None,
    ) -> List[Dict[str, Any]]:
        in_lists = {column: list(values) for column, values in (in_ or {}).items()}
        rows = [dict(r) for r in self._table(table).values() if self._matches(r, filters)]
        rows = [r for r in rows if all(r.get(c) in values for c, values in in_lists.items())]
        if search:
            columns, term = search
            term = term.strip().lower()
            if term:
                rows = [r for r in rows if any(term in str(r.get(c) or "").lower() for c in columns)]
        if order:
            rows.sort(key=lambda r: (r.get(order) is None, r.get(order)), reverse=desc)
        if limit is not None:
            rows = rows[offset:offset + limit]
        return rows

    def count(self, table: str, filters: Optional[Dict[str, Any]] = None) -> int:
        return len(self.query(table, filters))

    # Writes

    def _check_unique(self, table: str, row: Dict[str, Any]) -> None:
        key = UNIQUE_KEYS.get(table)
        if key is None:
            return
        for existing in self._table(table).values():
            if all(existing.get(c) == row.get(c) for c in key):
                raise ConflictError("Resource already exists")

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", self._now())
        if stored["id"] in self._table(table):
            raise ConflictError("Resource already exists")
        self._check_unique(table, stored)
        self._table(table)[stored["id"]] = stored
        return dict(stored)

    def insert_many(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.insert(table, row) for row in rows]

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str = "id") -> None:
        keys = [k.strip() for k in on_conflict.split(",")]
        if self.find_one(table, {k: row.get(k) for k in keys}) is None:
            self.insert(table, row)

    def update(self, table: str, id: str, patch: Dict[str, Any], not_found: str = "Not found") -> Dict[str, Any]:
        row = self._table(table).get(id)
        if row is None:
            raise NotFoundError(not_found)
        row.update(patch)
        return dict(row)

    def update_where(self, table: str, filters: Dict[str, Any], patch: Dict[str, Any]) -> List[Dict[str, Any]]:
        updated = []
        for row in self._table(table).values():
            if self._matches(row, filters):
                row.update(patch)
                updated.append(dict(row))
        return updated

    def delete(self, table: str, id: str) -> None:
        self._table(table).pop(id, None)

    def delete_where(self, table: str, filters: Dict[str, Any]) -> int:
        doomed = [id for id, row in self._table(table).items() if self._matches(row, filters)]
        for id in doomed:
            del self._table(table)[id]
        return len(doomed)

    def increment(self, table: str, id: str, column: str, delta: int) -> int:
        row = self._table(table).get(id)
        if row is None:
            raise NotFoundError()
        row[column] = (row.get(column) or 0) + delta
        return row[column]


def fake_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[dict]:
    """Treat the bearer token as the user id."""
    if credentials is None or not credentials.credentials:
        return None
    user_id = credentials.credentials
    return {"id": user_id, "email": f"{user_id}@example.com", "user_metadata": {}}


@pytest.fixture(autouse=True)
def _reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def store() -> InMemoryResourceStore:
    """Fresh in-memory store with three user profiles."""
    s = InMemoryResourceStore()
    for user_id, name in (("alice", "Alice"), ("bob", "Bob"), ("carol", "Carol")):
        s.insert("users", {
            "id": user_id,
            "email": f"{user_id}@example.com",
            "display_name": name,
            "avatar_url": "",
        })
    return s


@pytest.fixture
def client(store: InMemoryResourceStore) -> Generator[TestClient, None, None]:
    """Test client wired to the in-memory store and bearer-token-as-user-id identity."""
    app.dependency_overrides[get_resource_store] = lambda: store
    app.dependency_overrides[get_optional_user] = fake_optional_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Bearer headers for a user id."""
    def _auth(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {user_id}"}
    return _auth


@pytest.fixture
def make_idea(store: InMemoryResourceStore):
    def _make(creator_id: str, **fields) -> Dict[str, Any]:
        row = {
            "title": "An idea",
            "description": "",
            "creator_id": creator_id,
            "status": "draft",
            "is_published": False,
            "published_at": None,
            "upvotes": 0,
            "tags": [],
        }
        row.update(fields)
        return store.insert("ideas", row)
    return _make


@pytest.fixture
def make_post(store: InMemoryResourceStore):
    def _make(creator_id: str, **fields) -> Dict[str, Any]:
        row = {
            "title": "A post",
            "description": "",
            "content": "",
            "is_public": True,
            "creator_id": creator_id,
            "upvotes": 0,
        }
        row.update(fields)
        return store.insert("posts", row)
    return _make


@pytest.fixture
def make_feature_request(store: InMemoryResourceStore):
    def _make(creator_id: str, **fields) -> Dict[str, Any]:
        row = {
            "title": "Dark mode",
            "description": "Please add dark mode",
            "category": "ui",
            "status": "active",
            "is_public": True,
            "creator_id": creator_id,
            "upvotes": 0,
        }
        row.update(fields)
        return store.insert("feature_requests", row)
    return _make


@pytest.fixture
def assign_member(store: InMemoryResourceStore):
    def _assign(idea_id: str, user_id: str) -> Dict[str, Any]:
        return store.insert("idea_assignments", {"idea_id": idea_id, "user_id": user_id, "status": "in_progress"})
    return _assign
