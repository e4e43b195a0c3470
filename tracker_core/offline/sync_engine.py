# =============================================================================
# tracker_core/offline/sync_engine.py
# Event-driven Synchronization Engine
# =============================================================================
"""
SyncEngine - pushes pending local records to the remote store.

Features:
- Triggered by reachability changes, mutations and start-up (no polling)
- At most one reconcile pass in flight per engine
- Per-record failure isolation (one rejected record never blocks the rest)
- Single persist of the whole list after each pass
- Sync state callbacks for the UI
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from tracker_core.auth import UserSession
from tracker_core.data.supabase_client import RemoteStore
from tracker_core.errors import handle_error
from tracker_core.logging import LogContext, get_logger
from tracker_core.models import Entry, EntryStatus, Shift, ShiftStatus
from tracker_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

logger = get_logger(__name__)


@dataclass
class SyncState:
    """Current sync state."""
    is_syncing: bool = False
    last_sync_error: Optional[str] = None
    last_sync: Optional[datetime] = None
    total_synced: int = 0


class SyncEngine:
    """
    Reconciles one record type with its remote table.

    Usage:
        engine = EntrySyncEngine(lambda: store.records, store.persist,
                                 remote, connection, session)
        await engine.start()         # subscribe + initial pass if online
        synced = await engine.reconcile()
        engine.stop()
    """

    record_label = "records"

    def __init__(
        self,
        records: Callable[[], List[Any]],
        persist: Callable[[], Awaitable[None]],
        remote: Optional[RemoteStore],
        connection: ConnectionManager,
        session: UserSession,
    ):
        """
        Initialize sync engine.

        Args:
            records: Returns the live in-memory list of records
            persist: Writes that list to the local cache for the current user
            remote: Remote store (None when the backend is not configured)
            connection: Reachability signal
            session: Current-user provider
        """
        self._records = records
        self._persist = persist
        self._remote = remote
        self._connection = connection
        self._session = session
        self._state = SyncState()
        self._callbacks: List[Callable[[SyncState], None]] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()
        self._started = False

    # =========================================================================
    # PER-TYPE POLICY
    # =========================================================================

    def is_pending(self, record: Any) -> bool:
        raise NotImplementedError

    def mark_synced(self, record: Any) -> None:
        raise NotImplementedError

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def syncing(self) -> bool:
        return self._state.is_syncing

    @property
    def last_sync_error(self) -> Optional[str]:
        return self._state.last_sync_error

    @last_sync_error.setter
    def last_sync_error(self, message: Optional[str]) -> None:
        self._state.last_sync_error = message
        self._notify_callbacks()

    @property
    def is_online(self) -> bool:
        return self._connection.is_online

    @property
    def remote_enabled(self) -> bool:
        return self._remote is not None

    @property
    def pending_count(self) -> int:
        return sum(1 for record in self._records() if self.is_pending(record))

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Subscribe to reachability changes; run one pass now if online."""
        if self._started:
            return

        self._loop = asyncio.get_running_loop()
        self._connection.register_callback(self._on_connection_change)
        self._started = True
        logger.info(f"{type(self).__name__} started (online={self.is_online})")

        if self.is_online:
            self._schedule_reconcile()

    def stop(self) -> None:
        """Unsubscribe from reachability changes. In-flight passes finish on their own."""
        self._connection.unregister_callback(self._on_connection_change)
        self._started = False
        logger.info(f"{type(self).__name__} stopped")

    async def drain(self) -> None:
        """Wait for background passes scheduled so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_connection_change(self, state: ConnectionState) -> None:
        """Handle connection status changes (may run on a monitor thread)."""
        if state.status == ConnectionStatus.ONLINE:
            logger.info(f"Connection restored, syncing {self.record_label}")
            self._schedule_reconcile()

    def _schedule_reconcile(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self._spawn()
        else:
            loop.call_soon_threadsafe(self._spawn)

    def _spawn(self) -> None:
        task = self._loop.create_task(self.reconcile())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            handle_error(error, user_message=f"Background {self.record_label} sync failed")

    # =========================================================================
    # RECONCILIATION
    # =========================================================================

    async def reconcile(self) -> int:
        """
        Push pending records to the remote store.

        Returns:
            Number of records the remote store accepted in this pass
        """
        if self._state.is_syncing:
            logger.debug(f"{self.record_label} sync already running, trigger dropped")
            return 0

        user = self._session.current_user
        if self._remote is None or not self.is_online or user is None or not user.id:
            return 0

        pending = [record for record in self._records() if self.is_pending(record)]
        if not pending:
            return 0

        self._state.is_syncing = True
        self._state.last_sync_error = None
        self._notify_callbacks()

        synced = 0
        try:
            with LogContext(logger, f"Syncing {len(pending)} {self.record_label}"):
                for record in pending:
                    result = await self._remote.upsert(record.to_payload(user))

                    if result.error:
                        self._state.last_sync_error = result.error
                        logger.warning(f"{self.record_label} {record.id} not synced: {result.error}")
                        continue

                    self.mark_synced(record)
                    synced += 1

                # The list now belongs to whoever signed in meanwhile
                if self._session.current_user != user:
                    logger.warning(
                        f"User changed during {self.record_label} sync; "
                        f"results for {user.id} not cached, they re-sync on next sign-in"
                    )
                else:
                    await self._persist()

            self._state.total_synced += synced
            self._state.last_sync = datetime.now()
            logger.info(f"Sync complete: {synced} synced, {len(pending) - synced} still pending")
        finally:
            self._state.is_syncing = False
            self._notify_callbacks()

        return synced

    # =========================================================================
    # CALLBACKS / STATUS
    # =========================================================================

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback for sync state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        return {
            "is_online": self.is_online,
            "remote_enabled": self.remote_enabled,
            "is_syncing": self._state.is_syncing,
            "last_sync": self._state.last_sync.isoformat() if self._state.last_sync else None,
            "last_sync_error": self._state.last_sync_error,
            "pending_count": self.pending_count,
            "total_synced": self._state.total_synced,
        }


class EntrySyncEngine(SyncEngine):
    """Entries are pending until accepted: status pending -> synced."""

    record_label = "entries"

    def is_pending(self, record: Entry) -> bool:
        return record.status == EntryStatus.PENDING

    def mark_synced(self, record: Entry) -> None:
        record.mark_synced()


class ShiftSyncEngine(SyncEngine):
    """Planned, unsynced shifts are pushed; confirmation is a separate event."""

    record_label = "shifts"

    def is_pending(self, record: Shift) -> bool:
        return record.status == ShiftStatus.PLANNED and not record.synced

    def mark_synced(self, record: Shift) -> None:
        record.mark_synced()
