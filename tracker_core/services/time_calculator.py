# =============================================================================
# tracker_core/services/time_calculator.py
# Worked-hours arithmetic
# =============================================================================

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

import pandas as pd


def _to_datetime(date: Optional[str], time: Optional[str]) -> Optional[datetime]:
    if not date or not time:
        return None
    try:
        return datetime.fromisoformat(f"{date}T{time}")
    except ValueError:
        return None


def calculate_hours(date: Optional[str], time_in: Optional[str], time_out: Optional[str]) -> float:
    """
    Elapsed hours between time_in and time_out on the given date.

    A time_out earlier than time_in is an overnight shift ending the next
    day. Equal times are a zero-length shift, not 24 hours. Invalid input
    yields 0.

    Examples:
        calculate_hours("2024-01-01", "22:00", "02:00") -> 4.0
        calculate_hours("2024-01-01", "09:00", "17:30") -> 8.5
    """
    start = _to_datetime(date, time_in)
    end = _to_datetime(date, time_out)

    if start is None or end is None or end == start:
        return 0.0

    if end < start:
        end += timedelta(days=1)

    hours = (end - start).total_seconds() / 3600
    return round(hours, 2)


def _hours_of(entry: Any) -> float:
    value = entry.get("hours") if isinstance(entry, dict) else getattr(entry, "hours", 0)
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def total_hours(entries: Iterable[Any]) -> float:
    """Sum of hours over entries (records or storage dicts); junk counts as 0."""
    return round(sum(_hours_of(entry) for entry in entries), 2)


def hours_by_user(entries: Iterable[Any]) -> pd.DataFrame:
    """
    Per-user totals for the admin view.

    Returns:
        DataFrame with columns user_email, entries, hours (sorted by email)
    """
    rows = []
    for entry in entries:
        email = entry.get("userEmail") if isinstance(entry, dict) else getattr(entry, "user_email", None)
        rows.append({"user_email": email or "unknown", "hours": _hours_of(entry)})

    if not rows:
        return pd.DataFrame(columns=["user_email", "entries", "hours"])

    df = pd.DataFrame(rows)
    summary = (
        df.groupby("user_email", as_index=False)
        .agg(entries=("hours", "size"), hours=("hours", "sum"))
        .sort_values("user_email")
        .reset_index(drop=True)
    )
    summary["hours"] = summary["hours"].round(2)
    return summary
