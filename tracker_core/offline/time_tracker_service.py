# =============================================================================
# tracker_core/offline/time_tracker_service.py
# Time Tracker Service - Single API for Online/Offline Operations
# =============================================================================
"""
TimeTrackerService - the primary API for the app.

Builds and owns every collaborator explicitly (no module-level singletons):

    UserSession ─┐
    Connection ──┼──► EntryStore ──► EntrySyncEngine ──► RemoteStore("entries")
    Settings ────┤        │
                 │        └──────► LocalCache("entries")
                 └──► ShiftStore ──► ShiftSyncEngine ──► RemoteStore("shifts")
                          └──────► LocalCache("shifts")

Usage:
------
service = create_time_tracker()
await service.start()
await service.sign_in(User(id="u1", email="worker@example.com"))
await service.add_shift("2024-01-01", "22:00", "02:00")
entry = await service.confirm_shift(shift.id)
await service.sign_out()
await service.stop()
"""

from __future__ import annotations
import asyncio
from typing import Any, Callable, Dict, Optional

from tracker_core.auth import UserSession
from tracker_core.config import Settings, load_settings
from tracker_core.data.supabase_client import (
    RemoteStore,
    SupabaseRemoteStore,
    get_supabase_client,
)
from tracker_core.logging import get_logger, setup_logging
from tracker_core.models import Entry, Shift, User
from tracker_core.offline.connection_manager import ConnectionManager, ConnectionStatus
from tracker_core.offline.local_cache import (
    ENTRIES_STORE_KEY,
    SHIFTS_STORE_KEY,
    LocalCache,
)
from tracker_core.offline.record_store import EntryStore, ShiftStore

logger = get_logger(__name__)

RemoteFactory = Callable[[str], Optional[RemoteStore]]


def supabase_remote_factory(settings: Settings) -> RemoteFactory:
    """Factory creating one SupabaseRemoteStore per table (None when unconfigured)."""
    client = get_supabase_client(settings)

    def factory(table_name: str) -> Optional[RemoteStore]:
        if client is None:
            return None
        return SupabaseRemoteStore(client, table_name)

    return factory


class TimeTrackerService:
    """
    Entry/shift stores wired to their caches, sync engines and the backend.
    """

    def __init__(
        self,
        settings: Settings,
        remote_factory: Optional[RemoteFactory] = None,
        connection: Optional[ConnectionManager] = None,
        session: Optional[UserSession] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Application settings
            remote_factory: Creates a RemoteStore for a table name
                (default: Supabase from settings)
            connection: Reachability signal (default: probe-based manager)
            session: Current-user holder (default: new session)
        """
        self.settings = settings
        self.session = session or UserSession(admin_email=settings.admin_email)
        self.connection = connection or ConnectionManager(supabase_url=settings.supabase_url)

        if remote_factory is None:
            remote_factory = supabase_remote_factory(settings)

        db_path = settings.cache_db_path
        self.entries = EntryStore(
            LocalCache("entries", ENTRIES_STORE_KEY, db_path),
            remote_factory(Entry.TABLE),
            self.connection,
            self.session,
        )
        self.shifts = ShiftStore(
            LocalCache("shifts", SHIFTS_STORE_KEY, db_path),
            remote_factory(Shift.TABLE),
            self.connection,
            self.session,
        )
        self._started = False

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_online(self) -> bool:
        return self.connection.is_online

    @property
    def remote_enabled(self) -> bool:
        """False in local-only mode (backend not configured)."""
        return self.entries.sync.remote_enabled and self.shifts.sync.remote_enabled

    @property
    def current_user(self) -> Optional[User]:
        return self.session.current_user

    @property
    def last_sync_error(self) -> Optional[str]:
        """The one message to show; entry errors take precedence."""
        return self.entries.sync.last_sync_error or self.shifts.sync.last_sync_error

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Activate both sync engines (and connection monitoring if configured)."""
        if self._started:
            return

        if self.settings.monitor_connection:
            self.connection.start_monitoring()
        elif self.connection.status == ConnectionStatus.UNKNOWN:
            await asyncio.to_thread(self.connection.check_connection)

        await self.entries.sync.start()
        await self.shifts.sync.start()
        self._started = True
        logger.info(f"TimeTrackerService started. Online: {self.is_online}, remote: {self.remote_enabled}")

    async def stop(self) -> None:
        """Unsubscribe the engines and let in-flight passes finish."""
        self.entries.sync.stop()
        self.shifts.sync.stop()
        await self._drain_engines()

        if self.settings.monitor_connection:
            self.connection.stop_monitoring()

        self._started = False
        logger.info("TimeTrackerService stopped")

    async def _drain_engines(self) -> None:
        """Let background passes finish against the current user's list."""
        await self.entries.sync.drain()
        await self.shifts.sync.drain()

    # =========================================================================
    # SESSION
    # =========================================================================

    async def sign_in(self, user: User) -> None:
        """
        Switch to user and load their cached records.

        On an account switch the previous user's lists leave memory only;
        their cache stays for their next sign-in (sign_out() removes it).
        """
        previous = self.session.current_user
        if previous is not None and previous.id != user.id:
            await self._drain_engines()
            self.entries.reset()
            self.shifts.reset()

        self.session.sign_in(user)
        await self.entries.load()
        await self.shifts.load()
        await self.sync_all()

    async def sign_out(self) -> None:
        """Remove the current user's cached records and sign out."""
        await self._drain_engines()
        await self.entries.clear()
        await self.shifts.clear()
        self.session.sign_out()

    # =========================================================================
    # RECORDS
    # =========================================================================

    async def add_entry(
        self,
        date: str,
        time_in: str,
        time_out: str,
        hours: Optional[float] = None,
    ) -> Optional[Entry]:
        return await self.entries.add(date, time_in, time_out, hours)

    async def add_shift(self, date: str, time_in: str, time_out: str) -> Optional[Shift]:
        return await self.shifts.add(date, time_in, time_out)

    async def confirm_shift(self, shift_id: str) -> Optional[Entry]:
        """
        Confirm a planned shift and record the worked entry it implies.

        Returns:
            The new Entry, or None when the shift is unknown or already confirmed
        """
        draft = await self.shifts.confirm(shift_id)
        if draft is None:
            return None
        return await self.entries.add_draft(draft)

    async def sync_all(self) -> Dict[str, int]:
        """Run one reconcile pass for each record type."""
        return {
            "entries": await self.entries.sync.reconcile(),
            "shifts": await self.shifts.sync.reconcile(),
        }

    async def load_all_for_admin(self) -> bool:
        """
        Load every user's records from the backend (admins only).

        Returns:
            True when the admin path ran
        """
        if not self.session.is_admin:
            logger.warning("Non-admin user requested all records")
            return False

        await self.entries.fetch_all()
        await self.shifts.fetch_all()
        return True

    def get_status_display(self) -> Dict[str, Any]:
        """Get status for UI display."""
        user = self.session.current_user
        return {
            "user": user.email if user else None,
            "is_admin": self.session.is_admin,
            "connection": self.connection.get_status_display(),
            "entries": self.entries.get_status_display(),
            "shifts": self.shifts.get_status_display(),
            "last_sync_error": self.last_sync_error,
        }


def create_time_tracker(settings: Optional[Settings] = None) -> TimeTrackerService:
    """
    Build a TimeTrackerService from settings (loaded from secrets/env when omitted).

    Also configures package logging from settings.log_level / log_to_file.
    """
    if settings is None:
        settings = load_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    return TimeTrackerService(settings)
