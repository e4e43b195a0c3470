# =============================================================================
# tracker_core/models/records.py
# Entry / Shift record models
# =============================================================================
"""
Record models shared by the local cache, the record stores and the sync engines.

Three shapes exist for every record:
- the dataclass used in memory (snake_case attributes)
- the storage dict written to the local cache (camelCase keys, the format
  already on users' devices)
- the remote payload/row sent to Supabase (snake_case columns)
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple


def new_record_id() -> str:
    """Generate a globally unique, client-side record id."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class EntryStatus(Enum):
    """Entry lifecycle."""
    PENDING = "pending"
    SYNCED = "synced"


class ShiftStatus(Enum):
    """Shift lifecycle (independent of the synced flag)."""
    PLANNED = "planned"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class User:
    """Signed-in user as seen by the sync core."""
    id: str
    email: Optional[str] = None


@dataclass
class EntryDraft:
    """Entry data derived from a confirmed shift, hours not yet computed."""
    id: str
    date: str
    time_in: str
    time_out: str
    created_at: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None


# (attribute, storage key) pairs, in storage order
_ENTRY_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("date", "date"),
    ("time_in", "timeIn"),
    ("time_out", "timeOut"),
    ("hours", "hours"),
    ("status", "status"),
    ("created_at", "createdAt"),
    ("synced_at", "syncedAt"),
    ("user_id", "userId"),
    ("user_email", "userEmail"),
)

_SHIFT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("date", "date"),
    ("time_in", "timeIn"),
    ("time_out", "timeOut"),
    ("status", "status"),
    ("synced", "synced"),
    ("created_at", "createdAt"),
    ("confirmed_at", "confirmedAt"),
    ("user_id", "userId"),
    ("user_email", "userEmail"),
)


@dataclass
class Entry:
    """Worked-time record: pending -> synced."""
    id: str
    date: str
    time_in: str
    time_out: str
    hours: float = 0.0
    status: EntryStatus = EntryStatus.PENDING
    created_at: Optional[str] = None
    synced_at: Optional[str] = None
    user_id: Optional[str] = None
    user_email: Optional[str] = None

    TABLE: ClassVar[str] = "entries"

    @property
    def is_pending(self) -> bool:
        return self.status == EntryStatus.PENDING

    def mark_synced(self, when: Optional[str] = None) -> None:
        """Record a successful upsert. synced_at is only ever stamped once."""
        self.status = EntryStatus.SYNCED
        if not self.synced_at:
            self.synced_at = when or utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        """Plain storage dict (camelCase keys)."""
        data = {key: getattr(self, attr) for attr, key in _ENTRY_FIELDS}
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Entry:
        """Build from a storage dict; tolerates legacy records with missing fields."""
        try:
            status = EntryStatus(data.get("status") or EntryStatus.PENDING.value)
        except ValueError:
            status = EntryStatus.PENDING

        return cls(
            id=str(data.get("id") or new_record_id()),
            date=data.get("date") or "",
            time_in=data.get("timeIn") or "",
            time_out=data.get("timeOut") or "",
            hours=_to_float(data.get("hours")),
            status=status,
            created_at=data.get("createdAt"),
            synced_at=data.get("syncedAt"),
            user_id=data.get("userId"),
            user_email=data.get("userEmail"),
        )

    @classmethod
    def from_draft(cls, draft: EntryDraft, hours: float) -> Entry:
        return cls(
            id=draft.id,
            date=draft.date,
            time_in=draft.time_in,
            time_out=draft.time_out,
            hours=hours,
            created_at=draft.created_at,
            user_id=draft.user_id,
            user_email=draft.user_email,
        )

    def to_payload(self, user: User) -> Dict[str, Any]:
        """Remote row for upsert; owner fields fall back to the signed-in user."""
        return {
            "id": self.id,
            "date": self.date,
            "time_in": self.time_in,
            "time_out": self.time_out,
            "hours": self.hours,
            "created_at": self.created_at or utc_now_iso(),
            "user_id": self.user_id or user.id,
            "user_email": self.user_email or user.email,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> Entry:
        """Map a remote row; anything read from the backend is already synced."""
        return cls(
            id=str(row["id"]),
            date=row.get("date") or "",
            time_in=row.get("time_in") or "",
            time_out=row.get("time_out") or "",
            hours=_to_float(row.get("hours")),
            status=EntryStatus.SYNCED,
            created_at=row.get("created_at"),
            synced_at=row.get("synced_at"),
            user_id=row.get("user_id"),
            user_email=row.get("user_email"),
        )


@dataclass
class Shift:
    """Planned work period: planned -> confirmed, with a separate synced flag."""
    id: str
    date: str
    time_in: str
    time_out: str
    status: ShiftStatus = ShiftStatus.PLANNED
    synced: bool = False
    created_at: Optional[str] = None
    confirmed_at: Optional[str] = None
    user_id: Optional[str] = None
    user_email: Optional[str] = None

    TABLE: ClassVar[str] = "shifts"

    @property
    def is_pending(self) -> bool:
        return self.status == ShiftStatus.PLANNED and not self.synced

    def mark_synced(self, when: Optional[str] = None) -> None:
        """Record a successful upsert without touching status."""
        self.synced = True

    def confirm(self, when: Optional[str] = None) -> EntryDraft:
        """Move planned -> confirmed and derive the entry to record."""
        self.status = ShiftStatus.CONFIRMED
        self.confirmed_at = when or utc_now_iso()
        return EntryDraft(
            id=new_record_id(),
            date=self.date,
            time_in=self.time_in,
            time_out=self.time_out,
            created_at=utc_now_iso(),
            user_id=self.user_id,
            user_email=self.user_email,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {key: getattr(self, attr) for attr, key in _SHIFT_FIELDS}
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Shift:
        try:
            status = ShiftStatus(data.get("status") or ShiftStatus.PLANNED.value)
        except ValueError:
            status = ShiftStatus.PLANNED

        return cls(
            id=str(data.get("id") or new_record_id()),
            date=data.get("date") or "",
            time_in=data.get("timeIn") or "",
            time_out=data.get("timeOut") or "",
            status=status,
            synced=bool(data.get("synced", False)),
            created_at=data.get("createdAt"),
            confirmed_at=data.get("confirmedAt"),
            user_id=data.get("userId"),
            user_email=data.get("userEmail"),
        )

    def to_payload(self, user: User) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "time_in": self.time_in,
            "time_out": self.time_out,
            "status": self.status.value,
            "created_at": self.created_at or utc_now_iso(),
            "user_id": self.user_id or user.id,
            "user_email": self.user_email or user.email,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> Shift:
        try:
            status = ShiftStatus(row.get("status") or ShiftStatus.PLANNED.value)
        except ValueError:
            status = ShiftStatus.PLANNED

        return cls(
            id=str(row["id"]),
            date=row.get("date") or "",
            time_in=row.get("time_in") or "",
            time_out=row.get("time_out") or "",
            status=status,
            synced=True,
            created_at=row.get("created_at"),
            confirmed_at=row.get("confirmed_at"),
            user_id=row.get("user_id"),
            user_email=row.get("user_email"),
        )
