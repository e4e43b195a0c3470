# =============================================================================
# tests/unit/test_models.py
# Unit Tests for record models, session and errors
# =============================================================================

import logging

import pytest

from tracker_core.models import Entry, EntryStatus, Shift, ShiftStatus, User


class TestEntryModel:
    """Test entry storage/remote shapes"""

    def test_storage_dict_uses_camelcase(self):
        entry = Entry(id="e1", date="2024-01-01", time_in="09:00", time_out="17:00",
                      hours=8.0, user_id="u1", user_email="a@example.com")

        data = entry.to_dict()

        assert data["timeIn"] == "09:00"
        assert data["userEmail"] == "a@example.com"
        assert data["status"] == "pending"
        assert Entry.from_dict(data) == entry

    def test_from_dict_tolerates_legacy_records(self):
        entry = Entry.from_dict({"id": "old", "hours": None, "status": "weird"})

        assert entry.hours == 0.0
        assert entry.status == EntryStatus.PENDING
        assert entry.user_id is None

    def test_payload_keeps_own_owner(self):
        entry = Entry(id="e1", date="2024-01-01", time_in="09:00", time_out="17:00",
                      created_at="2024-01-01T08:00:00.000Z", user_id="owner", user_email="o@example.com")

        payload = entry.to_payload(User(id="admin", email="admin@example.com"))

        assert payload["user_id"] == "owner"
        assert payload["created_at"] == "2024-01-01T08:00:00.000Z"


class TestShiftModel:
    """Test shift lifecycle"""

    def test_synced_flag_independent_of_status(self):
        shift = Shift(id="s1", date="2024-01-01", time_in="09:00", time_out="17:00")

        shift.mark_synced()
        assert shift.status == ShiftStatus.PLANNED
        assert not shift.is_pending

        shift.confirm()
        assert shift.status == ShiftStatus.CONFIRMED
        assert shift.synced is True

    def test_from_row_is_synced(self):
        shift = Shift.from_row({"id": 7, "date": "2024-01-01", "status": "confirmed"})

        assert shift.id == "7"
        assert shift.synced is True
        assert shift.status == ShiftStatus.CONFIRMED


class TestUserSession:
    """Test current-user and admin checks"""

    def test_admin_match_is_case_insensitive(self):
        from tracker_core.auth import UserSession

        session = UserSession(admin_email="Admin@Example.com")
        session.sign_in(User(id="a", email="admin@example.COM"))

        assert session.is_admin is True

    def test_non_admin_and_signed_out(self):
        from tracker_core.auth import UserSession

        session = UserSession(admin_email="admin@example.com", user=User(id="u", email="u@example.com"))
        assert session.is_admin is False

        session.sign_out()
        assert session.current_user is None
        assert session.user_id is None
        assert session.is_admin is False

    def test_no_admin_configured(self):
        from tracker_core.auth import UserSession

        session = UserSession(user=User(id="u", email="u@example.com"))

        assert session.is_admin is False


class TestErrors:
    """Test exception hierarchy and handler"""

    def test_storage_error_details(self):
        from tracker_core.errors import LocalStorageError, TimeTrackerError

        error = LocalStorageError("disk full", namespace="entries", operation="persist")

        assert isinstance(error, TimeTrackerError)
        assert error.to_dict()["details"] == {"namespace": "entries", "operation": "persist"}
        assert str(error).startswith("[STORE_001] disk full")

    def test_handle_error_messages(self, caplog):
        from tracker_core.errors import ConfigurationError, LocalStorageError, handle_error

        with caplog.at_level(logging.ERROR):
            recoverable = handle_error(LocalStorageError("disk full"))
            critical = handle_error(ConfigurationError("bad secrets"))

        assert recoverable == "Error: disk full"
        assert critical == "Critical Error: bad secrets. Please contact support."
        assert "[STORE_001] disk full" in caplog.text

    def test_handle_error_generic_exception(self):
        from tracker_core.errors import handle_error

        message = handle_error(ValueError("oops"), log_error=False, user_message="Sync failed")

        assert message == "Error: Sync failed"
