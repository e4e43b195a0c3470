# =============================================================================
# tracker_core/errors/__init__.py
# Centralized Error Handling for the Time Tracker
# =============================================================================

from .exceptions import (
    TimeTrackerError,
    ConfigurationError,
    LocalStorageError,
    RemoteStoreError,
)

from .handlers import handle_error

__all__ = [
    # Exceptions
    "TimeTrackerError",
    "ConfigurationError",
    "LocalStorageError",
    "RemoteStoreError",
    # Handlers
    "handle_error",
]
