"""Shared pytest fixtures and configuration."""

import json
import os
import pytest
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from src.services.cache import MemoryCache
from src.services.schedule_sync import ScheduleSyncService
from tests.utils.fakes import InMemoryWorkStore


@pytest.fixture
def store():
    """Empty in-memory work store."""
    return InMemoryWorkStore()


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def service(store, cache):
    """Sync service over the in-memory store."""
    return ScheduleSyncService(store, cache=cache)


@pytest.fixture
def foundation_schedule():
    """Single main activity schedule for work 42."""
    return json.dumps({"data": [{"id": 1, "text": "Foundation", "progress": 0.4, "type": "project"}]})


@pytest.fixture
def nested_tasks():
    """Two-level schedule: a main activity with two children and a grandchild."""
    return [
        {"id": "1", "text": "Civil works", "type": "project", "progress": 0.5, "parent": None},
        {"id": "2", "text": "Excavation", "type": "task", "progress": 1, "parent": "1"},
        {"id": "3", "text": "Footings", "type": "task", "progress": 0.25, "parent": "1"},
        {"id": "4", "text": "Rebar", "type": "task", "progress": 0, "parent": "3"},
    ]


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client whose query builders chain back to themselves."""
    from unittest.mock import MagicMock

    client = MagicMock()
    query = MagicMock()
    for method in ("select", "eq", "limit", "order", "insert", "update", "delete", "is_"):
        getattr(query, method).return_value = query
    query.not_ = query
    client.table.return_value = query
    client.query = query
    return client


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
