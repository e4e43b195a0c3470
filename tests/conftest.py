# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import asyncio
from typing import Any, Dict, List, Optional, Set
from unittest.mock import MagicMock

import pytest

from tracker_core.auth import UserSession
from tracker_core.config import Settings
from tracker_core.data.supabase_client import RemoteResult, RemoteStore
from tracker_core.models import User
from tracker_core.offline.connection_manager import ConnectionManager
from tracker_core.offline.local_cache import (
    ENTRIES_STORE_KEY,
    SHIFTS_STORE_KEY,
    LocalCache,
)


# =============================================================================
# FAKES
# =============================================================================

class FakeRemoteStore(RemoteStore):
    """
    In-memory stand-in for a Supabase table.

    Attributes:
        upserts: Every payload passed to upsert(), in call order
        fail_ids: Record ids whose upsert is rejected
        fail_all: Reject every upsert
        rows: Rows returned by select_all()
        select_error: When set, select_all() fails with this message
        gate: When set, upsert() waits on it before answering
    """

    def __init__(self, table_name: str = "entries"):
        self.table_name = table_name
        self.upserts: List[Dict[str, Any]] = []
        self.fail_ids: Set[str] = set()
        self.fail_all = False
        self.rows: List[Dict[str, Any]] = []
        self.select_error: Optional[str] = None
        self.gate: Optional[asyncio.Event] = None

    async def upsert(self, payload: Dict[str, Any]) -> RemoteResult:
        self.upserts.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_all or payload["id"] in self.fail_ids:
            return RemoteResult(error=f"rejected {payload['id']}")
        return RemoteResult(data=[payload])

    async def select_all(self) -> RemoteResult:
        if self.select_error:
            return RemoteResult(error=self.select_error)
        return RemoteResult(data=list(self.rows))

    @property
    def upserted_ids(self) -> List[str]:
        return [payload["id"] for payload in self.upserts]


# =============================================================================
# USER / SESSION FIXTURES
# =============================================================================

@pytest.fixture
def user():
    """Regular signed-in worker"""
    return User(id="user-1", email="worker@example.com")


@pytest.fixture
def other_user():
    """Second account on the same device"""
    return User(id="user-2", email="other@example.com")


@pytest.fixture
def session(user):
    """Session with the regular user signed in"""
    return UserSession(admin_email="admin@example.com", user=user)


@pytest.fixture
def online():
    """Connection that starts reachable"""
    return ConnectionManager(initial_online=True)


@pytest.fixture
def offline():
    """Connection that starts unreachable"""
    return ConnectionManager(initial_online=False)


# =============================================================================
# STORAGE / REMOTE FIXTURES
# =============================================================================

@pytest.fixture
def db_path(tmp_path):
    """Throwaway SQLite file for the local cache"""
    return tmp_path / "time-tracker.db"


@pytest.fixture
def entry_cache(db_path):
    return LocalCache("entries", ENTRIES_STORE_KEY, db_path)


@pytest.fixture
def shift_cache(db_path):
    return LocalCache("shifts", SHIFTS_STORE_KEY, db_path)


@pytest.fixture
def remote():
    """Fake remote entries table"""
    return FakeRemoteStore("entries")


@pytest.fixture
def shift_remote():
    """Fake remote shifts table"""
    return FakeRemoteStore("shifts")


@pytest.fixture
def settings(tmp_path):
    """Local-only settings pointing at a temp data dir"""
    return Settings(data_dir=tmp_path / "data", admin_email="admin@example.com")


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_supabase():
    """Mock Supabase client"""
    mock_client = MagicMock()
    table = mock_client.table.return_value
    table.upsert.return_value.execute.return_value.data = []
    table.select.return_value.order.return_value.range.return_value.execute.return_value.data = []
    return mock_client


# =============================================================================
# HELPER FIXTURES
# =============================================================================

@pytest.fixture
def write_raw():
    """Store a raw collection value (e.g. the legacy flat list) under a cache's key"""
    def _write(cache: LocalCache, value: Any) -> None:
        with cache._transaction(immediate=True) as conn:
            cache._write_value(conn, value)
    return _write


@pytest.fixture
def read_raw():
    """Read back the raw collection value under a cache's key"""
    def _read(cache: LocalCache) -> Any:
        with cache._transaction() as conn:
            return cache._read_value(conn)
    return _read


@pytest.fixture
def remote_factory():
    """
    Remote factory for TimeTrackerService handing out one FakeRemoteStore per
    table; created stores are reachable as factory.stores[table].
    """
    stores: Dict[str, FakeRemoteStore] = {}

    def factory(table_name: str) -> FakeRemoteStore:
        stores.setdefault(table_name, FakeRemoteStore(table_name))
        return stores[table_name]

    factory.stores = stores
    return factory
