# =============================================================================
# tracker_core/services/__init__.py
# =============================================================================

from tracker_core.services.time_calculator import (
    calculate_hours,
    total_hours,
    hours_by_user,
)

__all__ = ["calculate_hours", "total_hours", "hours_by_user"]
