# =============================================================================
# tracker_core/offline/__init__.py
# Offline-First Architecture for the Time Tracker
# =============================================================================
"""
Offline-First Architecture Module

Every write lands in memory and in the local cache first; the sync engines
push it to the backend whenever the device is reachable.

Architecture:
------------
┌─────────────────────────────────────────────────────────────────┐
│                    OFFLINE-FIRST ARCHITECTURE                    │
├─────────────────────────────────────────────────────────────────┤
│                                                                  │
│   ┌──────────────────────────────────────────────────────────┐  │
│   │                 TimeTrackerService                        │  │
│   │         (Single API - Apps use this only)                 │  │
│   └──────────────────────────────────────────────────────────┘  │
│                            │                                     │
│              ┌─────────────┴─────────────┐                      │
│              ▼                           ▼                      │
│   ┌──────────────────┐        ┌──────────────────┐             │
│   │   EntryStore     │        │   ShiftStore     │             │
│   └──────────────────┘        └──────────────────┘             │
│       │          │                │          │                  │
│       ▼          ▼                ▼          ▼                  │
│ ┌──────────┐ ┌──────────┐   ┌──────────┐ ┌──────────┐          │
│ │LocalCache│ │SyncEngine│   │LocalCache│ │SyncEngine│          │
│ │ (SQLite) │ │          │   │ (SQLite) │ │          │          │
│ └──────────┘ └──────────┘   └──────────┘ └──────────┘          │
│                   │    ▲                      │    ▲            │
│                   ▼    │ ConnectionManager    ▼    │            │
│               ┌──────────────────────────────────────┐          │
│               │          Supabase (Cloud)            │          │
│               └──────────────────────────────────────┘          │
└─────────────────────────────────────────────────────────────────┘

Usage:
------
from tracker_core.offline import create_time_tracker

service = create_time_tracker()
await service.start()
await service.sign_in(user)
await service.add_entry("2024-01-01", "09:00", "17:30")
print(service.entries.sync.pending_count)
"""

from tracker_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

from tracker_core.offline.local_cache import (
    LocalCache,
    ENTRIES_STORE_KEY,
    SHIFTS_STORE_KEY,
)

from tracker_core.offline.sync_engine import (
    SyncEngine,
    EntrySyncEngine,
    ShiftSyncEngine,
    SyncState,
)

from tracker_core.offline.record_store import (
    RecordStore,
    EntryStore,
    ShiftStore,
)

from tracker_core.offline.time_tracker_service import (
    TimeTrackerService,
    create_time_tracker,
)

__all__ = [
    # Connection Management
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    # Local Cache
    "LocalCache",
    "ENTRIES_STORE_KEY",
    "SHIFTS_STORE_KEY",
    # Sync Engines
    "SyncEngine",
    "EntrySyncEngine",
    "ShiftSyncEngine",
    "SyncState",
    # Record Stores
    "RecordStore",
    "EntryStore",
    "ShiftStore",
    # Unified Service (Main API)
    "TimeTrackerService",
    "create_time_tracker",
]
