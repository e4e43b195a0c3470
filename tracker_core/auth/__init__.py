# =============================================================================
# tracker_core/auth/__init__.py
# =============================================================================

from tracker_core.auth.session import UserSession

__all__ = ["UserSession"]
