# =============================================================================
# tracker_core/models/__init__.py
# =============================================================================

from tracker_core.models.records import (
    Entry,
    EntryDraft,
    EntryStatus,
    Shift,
    ShiftStatus,
    User,
    new_record_id,
    utc_now_iso,
)

__all__ = [
    "Entry",
    "EntryDraft",
    "EntryStatus",
    "Shift",
    "ShiftStatus",
    "User",
    "new_record_id",
    "utc_now_iso",
]
