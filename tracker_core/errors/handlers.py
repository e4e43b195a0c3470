# =============================================================================
# tracker_core/errors/handlers.py
# Error Handling Utilities for the Time Tracker
# =============================================================================

from __future__ import annotations
import traceback
from typing import Optional

from tracker_core.logging import get_logger
from .exceptions import TimeTrackerError

logger = get_logger(__name__)


def handle_error(
    error: BaseException,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> str:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        log_error: Whether to log the error
        user_message: Custom message for the user (uses error message if None)

    Returns:
        The single human-readable message to surface in the UI
    """
    if isinstance(error, TimeTrackerError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {
            "traceback": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        }
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=(type(error), error, error.__traceback__),
        )

    if recoverable:
        return f"Error: {message}"
    return f"Critical Error: {message}. Please contact support."
