"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings load at import time, so required values must exist first
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("STORE_ID", "store-test-1")
os.environ.setdefault("STORE_CURRENCY", "USD")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

from config.settings import Settings

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(
        self,
        data: list = None,
        count: int = None,
        recorder: list = None,
        fail: Exception = None,
        deletions: list = None,
    ):
        self._data = data or []
        self._count = count
        self._recorder = recorder
        self._fail = fail
        self._deletions = deletions
        self._deleting = False
        self._filters: list[tuple[str, object]] = []

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        rows = []
        for position, item in enumerate(data, start=1):
            row = dict(item)
            row.setdefault("id", f"test-uuid-{position}")
            row["created_at"] = datetime.utcnow().isoformat() + "Z"
            row["updated_at"] = datetime.utcnow().isoformat() + "Z"
            rows.append(row)
        if self._recorder is not None:
            self._recorder.extend(rows)
        self._data = rows
        self._count = None
        return self

    def delete(self):
        self._deleting = True
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._fail is not None:
            raise self._fail
        if self._deleting:
            if self._deletions is not None:
                self._deletions.append(dict(self._filters))
            return MockSupabaseResponse(data=[])
        data = [
            row for row in self._data
            if all(row.get(column, value) == value for column, value in self._filters)
        ]
        return MockSupabaseResponse(
            data=data,
            count=self._count if self._count is not None else len(data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(
        self,
        data: list = None,
        count: int = None,
        recorder: list = None,
        fail: Exception = None,
        deletions: list = None,
    ):
        self._data = data or []
        self._count = count
        self._recorder = recorder
        self._fail = fail
        self._deletions = deletions

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._data.copy(), self._count, self._recorder, self._fail, self._deletions)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)

    def delete(self):
        return self._query().delete()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.inserted: dict[str, list] = {}
        self._failures: dict[str, Exception] = {}
        self.deleted: dict[str, list] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def fail_table(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self._failures[table_name] = error

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        recorder = self.inserted.setdefault(name, [])
        deletions = self.deleted.setdefault(name, [])
        return MockSupabaseTable(
            config["data"], config["count"], recorder, self._failures.get(name), deletions
        )


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "name": "Tee", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.product_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def test_settings() -> Settings:
    """Settings for one store with no product limit."""
    return Settings(
        supabase_url="https://test-project.supabase.co",
        supabase_key="test-anon-key",
        store_id="store-test-1",
        store_currency="USD",
        max_products=None,
    )


@pytest.fixture
def sample_product_row() -> dict:
    """Product row as stored in Supabase."""
    return {
        "id": "test-uuid-123",
        "store_id": "store-test-1",
        "name": "Classic Tee",
        "slug": "classic-tee",
        "description": "Soft cotton tee",
        "price": 1999,
        "images": [{"url": "https://cdn.example.com/tee.jpg", "alt": "Classic Tee", "position": 0}],
        "category": "Shirts",
        "status": "active",
        "is_digital": False,
        "track_inventory": True,
        "inventory_count": 12,
        "has_variants": False,
        "variant_options": [],
        "created_at": "2026-01-05T10:00:00Z",
        "updated_at": "2026-01-05T10:00:00Z"
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
