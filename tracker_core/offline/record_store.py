# =============================================================================
# tracker_core/offline/record_store.py
# In-memory Record Stores (Entries / Shifts)
# =============================================================================
"""
Record stores - the single in-memory source of truth the UI observes.

Every mutation follows the same sequence:
    mutate list -> notify -> persist to LocalCache -> awaited sync attempt

Usage:
------
entries = EntryStore(entry_cache, remote, connection, session)
await entries.load()
entry = await entries.add("2024-01-01", "09:00", "17:30")
print(entries.sync.last_sync_error)
"""

from __future__ import annotations
from datetime import date as date_cls
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from tracker_core.auth import UserSession
from tracker_core.data.supabase_client import RemoteStore
from tracker_core.logging import get_logger
from tracker_core.models import (
    Entry,
    EntryDraft,
    Shift,
    ShiftStatus,
    new_record_id,
    utc_now_iso,
)
from tracker_core.offline.connection_manager import ConnectionManager
from tracker_core.offline.local_cache import LocalCache
from tracker_core.offline.sync_engine import (
    EntrySyncEngine,
    ShiftSyncEngine,
    SyncEngine,
)
from tracker_core.services.time_calculator import calculate_hours

logger = get_logger(__name__)

R = TypeVar("R", Entry, Shift)


class RecordStore(Generic[R]):
    """
    Records of one type for the signed-in user.

    Subclasses set record_type and engine_class.
    """

    record_type: Type[R]
    engine_class: Type[SyncEngine]

    def __init__(
        self,
        cache: LocalCache,
        remote: Optional[RemoteStore],
        connection: ConnectionManager,
        session: UserSession,
    ):
        self._cache = cache
        self._remote = remote
        self._connection = connection
        self._session = session
        self._records: List[R] = []
        self._loading = True
        self._callbacks: List[Callable[[List[R]], None]] = []

        self.sync = self.engine_class(
            lambda: self._records,
            self.persist,
            remote,
            connection,
            session,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def records(self) -> List[R]:
        """Live list in display order."""
        return self._records

    @property
    def loading(self) -> bool:
        return self._loading

    def get(self, record_id: str) -> Optional[R]:
        return next((r for r in self._records if r.id == record_id), None)

    # =========================================================================
    # CACHE
    # =========================================================================

    async def load(self) -> None:
        """Replace the list with the signed-in user's cached records."""
        user = self._session.current_user
        if user is None:
            return

        stored = await self._cache.load(user.id)
        self._records = [self.record_type.from_dict(item) for item in stored]
        self._loading = False
        logger.info(f"Loaded {len(self._records)} {self._cache.namespace} for user {user.id}")
        self._notify_callbacks()

    async def persist(self) -> None:
        """
        Write the signed-in user's records to the cache.

        Only records owned by that user (or ownerless legacy records) are
        written; rows of other users loaded by fetch_all() stay in memory.
        """
        user = self._session.current_user
        if user is None:
            return
        own = [r for r in self._records if r.user_id in (None, user.id)]
        await self._cache.persist(own, user.id)

    async def clear(self) -> None:
        """Forget the signed-in user's records (sign-out)."""
        user = self._session.current_user
        if user is not None:
            await self._cache.clear(user.id)
        self.reset()

    def reset(self) -> None:
        """Drop the in-memory list without touching the cache."""
        self._records = []
        self._loading = True
        self._notify_callbacks()

    async def _append(self, record: R) -> R:
        self._records.append(record)
        self._notify_callbacks()
        await self.persist()
        await self.sync.reconcile()
        return record

    # =========================================================================
    # ADMIN
    # =========================================================================

    async def fetch_all(self) -> None:
        """
        Replace the list with every user's rows from the remote store.

        No-op when the backend is not configured or the device is offline.
        The result is not persisted to the local cache. The signed-in user's
        own records that the remote store does not return yet (e.g. still
        pending) are kept after the remote rows.
        """
        if self._remote is None or not self._connection.is_online:
            return

        result = await self._remote.select_all()
        if result.error:
            self.sync.last_sync_error = result.error
            return

        fetched = [self.record_type.from_row(row) for row in result.data]
        fetched_ids = {r.id for r in fetched}
        user_id = self._session.user_id
        unsent = [
            r for r in self._records
            if r.id not in fetched_ids and r.user_id in (None, user_id)
        ]

        self._records = fetched + unsent
        self._loading = False
        logger.info(
            f"Fetched {len(fetched)} {self._cache.namespace} for all users "
            f"({len(unsent)} local-only kept)"
        )
        self._notify_callbacks()

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: Callable[[List[R]], None]) -> None:
        """Register a callback for list changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[List[R]], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._records)
            except Exception as e:
                logger.error(f"Error in store callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        status = self.sync.get_status_display()
        status["count"] = len(self._records)
        status["loading"] = self._loading
        return status


class EntryStore(RecordStore[Entry]):
    """Worked-time entries."""

    record_type = Entry
    engine_class = EntrySyncEngine

    async def add(
        self,
        date: str,
        time_in: str,
        time_out: str,
        hours: Optional[float] = None,
    ) -> Optional[Entry]:
        """
        Record a new pending entry for the signed-in user.

        Args:
            date: Day of work (YYYY-MM-DD)
            time_in: Start time (HH:MM)
            time_out: End time (HH:MM), may be past midnight
            hours: Worked hours (computed from the times when omitted)

        Returns:
            The new Entry, or None when nobody is signed in
        """
        user = self._session.current_user
        if user is None:
            return None

        entry = Entry(
            id=new_record_id(),
            date=date,
            time_in=time_in,
            time_out=time_out,
            hours=calculate_hours(date, time_in, time_out) if hours is None else hours,
            created_at=utc_now_iso(),
            user_id=user.id,
            user_email=user.email,
        )
        return await self._append(entry)

    async def add_draft(self, draft: EntryDraft, hours: Optional[float] = None) -> Optional[Entry]:
        """Record the entry derived from a confirmed shift."""
        if self._session.current_user is None:
            return None

        if hours is None:
            hours = calculate_hours(draft.date, draft.time_in, draft.time_out)
        return await self._append(Entry.from_draft(draft, hours))


class ShiftStore(RecordStore[Shift]):
    """Planned shifts."""

    record_type = Shift
    engine_class = ShiftSyncEngine

    async def add(self, date: str, time_in: str, time_out: str) -> Optional[Shift]:
        """Plan a shift for the signed-in user."""
        user = self._session.current_user
        if user is None:
            return None

        shift = Shift(
            id=new_record_id(),
            date=date,
            time_in=time_in,
            time_out=time_out,
            created_at=utc_now_iso(),
            user_id=user.id,
            user_email=user.email,
        )
        return await self._append(shift)

    async def confirm(self, shift_id: str) -> Optional[EntryDraft]:
        """
        Confirm a planned shift.

        Returns:
            The EntryDraft to hand to the entry store, or None when the shift
            is unknown or was already confirmed
        """
        shift = self.get(shift_id)
        if shift is None or shift.status != ShiftStatus.PLANNED:
            return None

        draft = shift.confirm()
        self._notify_callbacks()
        await self.persist()
        await self.sync.reconcile()
        return draft

    def today_shifts(self, today: Optional[date_cls] = None) -> List[Shift]:
        """Planned shifts scheduled for today."""
        day = (today or date_cls.today()).isoformat()
        return [s for s in self._records if s.date == day and s.status == ShiftStatus.PLANNED]
