# =============================================================================
# tracker_core/offline/connection_manager.py
# Network Reachability Signal
# =============================================================================
"""
ConnectionManager - Tracks whether the device is online and tells subscribers.

Features:
- "became reachable" / "became unreachable" events via set_online()
- Optional socket probe (internet + Supabase host)
- Optional background monitoring thread
- Subscribe/unsubscribe callbacks for status changes
"""

from __future__ import annotations
import socket
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional
from urllib.parse import urlparse

from tracker_core.logging import get_logger

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"         # Initial state


@dataclass
class ConnectionState:
    """Current connection state with metadata."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0


class ConnectionManager:
    """
    Reachability signal shared by the sync engines.

    Usage:
        connection = ConnectionManager(initial_online=True)
        connection.register_callback(on_change)
        connection.set_online(False)   # "became unreachable"
        connection.set_online(True)    # "became reachable"
    """

    # Configuration
    CHECK_INTERVAL_ONLINE = 30      # Seconds between checks when online
    CHECK_INTERVAL_OFFLINE = 10     # Seconds between checks when offline
    CONNECTION_TIMEOUT = 5          # Timeout for connection tests
    PROBE_HOSTS = (
        ("8.8.8.8", 53),            # Google DNS
        ("1.1.1.1", 53),            # Cloudflare DNS
        ("208.67.222.222", 53),     # OpenDNS
    )

    def __init__(self, initial_online: Optional[bool] = None, supabase_url: Optional[str] = None):
        """
        Initialize connection manager.

        Args:
            initial_online: Known reachability at start (None = unknown)
            supabase_url: Backend URL probed by check_connection()
        """
        self._state = ConnectionState()
        self._callbacks: List[Callable[[ConnectionState], None]] = []
        self._monitor_thread: Optional[threading.Thread] = None
        self._stop_monitoring = threading.Event()
        self.supabase_url = supabase_url

        if initial_online is not None:
            self._state.status = ConnectionStatus.ONLINE if initial_online else ConnectionStatus.OFFLINE
            if initial_online:
                self._state.last_online = datetime.now()

    @property
    def state(self) -> ConnectionState:
        """Get current connection state."""
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        """Get current status."""
        return self._state.status

    @property
    def is_online(self) -> bool:
        """Check if the device is reachable."""
        return self._state.status == ConnectionStatus.ONLINE

    def set_online(self, online: bool) -> None:
        """
        Apply a reachability event.

        Subscribers are only notified when the status actually changes.
        """
        old_status = self._state.status
        new_status = ConnectionStatus.ONLINE if online else ConnectionStatus.OFFLINE
        self._state.last_check = datetime.now()

        if online:
            self._state.last_online = self._state.last_check
            self._state.consecutive_failures = 0
        else:
            self._state.consecutive_failures += 1

        if old_status == new_status:
            return

        self._state.status = new_status
        logger.info(f"Connection status changed: {old_status.value} -> {new_status.value}")
        self._notify_callbacks()

    def check_connection(self) -> ConnectionState:
        """
        Probe connectivity and update state.

        Returns:
            Updated ConnectionState
        """
        online = self._check_internet() and self._check_supabase()
        self.set_online(online)
        return self._state

    def _probe(self, host: str, port: int) -> bool:
        try:
            with socket.create_connection((host, port), timeout=self.CONNECTION_TIMEOUT):
                return True
        except OSError:
            return False

    def _check_internet(self) -> bool:
        """Check internet connectivity by reaching well-known hosts."""
        return any(self._probe(host, port) for host, port in self.PROBE_HOSTS)

    def _check_supabase(self) -> bool:
        """Check the backend host; no backend configured counts as reachable."""
        if not self.supabase_url:
            return True

        parsed = urlparse(self.supabase_url)
        if not parsed.hostname:
            return False
        return self._probe(parsed.hostname, parsed.port or 443)

    def start_monitoring(self) -> None:
        """Start background connection monitoring."""
        if self._monitor_thread is not None and self._monitor_thread.is_alive():
            return

        self._stop_monitoring.clear()
        self._monitor_thread = threading.Thread(
            target=self._monitoring_loop,
            daemon=True,
            name="ConnectionMonitor"
        )
        self._monitor_thread.start()
        logger.debug("Connection monitoring started")

    def stop_monitoring(self) -> None:
        """Stop background connection monitoring."""
        self._stop_monitoring.set()
        if self._monitor_thread:
            self._monitor_thread.join(timeout=self.CONNECTION_TIMEOUT * 2)
            self._monitor_thread = None
        logger.debug("Connection monitoring stopped")

    def _monitoring_loop(self) -> None:
        """Background monitoring loop."""
        while not self._stop_monitoring.is_set():
            try:
                self.check_connection()
            except Exception as e:
                logger.error(f"Error in connection check: {e}")

            interval = (
                self.CHECK_INTERVAL_ONLINE
                if self.is_online
                else self.CHECK_INTERVAL_OFFLINE
            )
            if self._stop_monitoring.wait(timeout=interval):
                break

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """
        Register a callback for connection status changes.

        Args:
            callback: Function called with ConnectionState when status changes
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def _notify_callbacks(self) -> None:
        """Notify all registered callbacks of status change."""
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        return {
            "status": self._state.status.value,
            "is_online": self.is_online,
            "last_check": self._state.last_check.isoformat() if self._state.last_check else None,
            "last_online": self._state.last_online.isoformat() if self._state.last_online else None,
            "failures": self._state.consecutive_failures,
        }
