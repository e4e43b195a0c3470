# =============================================================================
# tracker_core/auth/session.py
# Current-user reference consumed by the stores and sync engines
# =============================================================================
"""
UserSession - holds who is signed in.

Authentication itself happens elsewhere (Supabase Auth); this object only
carries the resulting user so that persistence and sync can be scoped to it.
"""

from __future__ import annotations
from typing import Callable, List, Optional

from tracker_core.logging import get_logger
from tracker_core.models import User

logger = get_logger(__name__)


class UserSession:
    """Current user (may be None) plus the admin role check."""

    def __init__(self, admin_email: Optional[str] = None, user: Optional[User] = None):
        self.admin_email = (admin_email or "").strip().lower()
        self._user = user
        self._callbacks: List[Callable[[Optional[User]], None]] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def user_id(self) -> Optional[str]:
        return self._user.id if self._user else None

    @property
    def is_admin(self) -> bool:
        """Signed-in email matches the configured admin email (case-insensitive)."""
        if not self._user or not self._user.email or not self.admin_email:
            return False
        return self._user.email.strip().lower() == self.admin_email

    def sign_in(self, user: User) -> None:
        if self._user == user:
            return
        self._user = user
        logger.info(f"User signed in: {user.email or user.id}")
        self._notify_callbacks()

    def sign_out(self) -> None:
        if self._user is None:
            return
        logger.info(f"User signed out: {self._user.email or self._user.id}")
        self._user = None
        self._notify_callbacks()

    def register_callback(self, callback: Callable[[Optional[User]], None]) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[Optional[User]], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._user)
            except Exception as e:
                logger.error(f"Error in session callback: {e}")
