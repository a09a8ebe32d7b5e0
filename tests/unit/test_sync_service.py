from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from familyhub.core.constants import SyncStatus
from familyhub.models.calendar_event import CalendarEvent
from familyhub.models.document import Document
from familyhub.models.google_calendar import GoogleCalendar
from familyhub.models.password import PasswordEntry
from familyhub.models.sync_audit import SyncAudit
from familyhub.services.sync_service import SyncService

STALE = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _event(**overrides):
    data = {
        "title": "Dentist",
        "start_time": "2024-03-01T09:00:00",
        "end_time": "2024-03-01T09:30:00",
        "source": "health",
        "source_reference": "task-1",
        "category": "medical",
    }
    data.update(overrides)
    return data


class TestEnsureCalendarEvent:
    @pytest.fixture
    def sync(self, db):
        return SyncService(db, request_id="req-1", user_id="user-1")

    def test_second_call_updates_the_same_row(self, db, sync):
        first = sync.ensure_calendar_event(_event())
        second = sync.ensure_calendar_event(_event(title="Dentist (moved)", location="Main St"))

        assert first.ok and second.ok
        assert first.existed is False
        assert second.existed is True
        assert first.id == second.id

        rows = db.query(CalendarEvent).all()
        assert len(rows) == 1
        assert rows[0].title == "Dentist (moved)"
        assert rows[0].location == "Main St"

    def test_identical_resave_stamps_updated_at(self, db, sync):
        first = sync.ensure_calendar_event(_event())
        row = db.get(CalendarEvent, first.id)
        row.updated_at = STALE
        db.commit()

        sync.ensure_calendar_event(_event())

        db.refresh(row)
        assert row.updated_at.replace(tzinfo=None) > STALE.replace(tzinfo=None)

    def test_zero_length_event_is_repaired(self, db, sync):
        result = sync.ensure_calendar_event(_event(end_time="2024-03-01T09:00:00"))

        row = db.get(CalendarEvent, result.id)
        assert row.end_time == "2024-03-01T10:00:00"

    def test_all_day_end_is_exclusive(self, db, sync):
        result = sync.ensure_calendar_event(
            _event(start_time="2024-03-01", end_time="2024-03-01", all_day=True)
        )

        row = db.get(CalendarEvent, result.id)
        assert row.start_time == "2024-03-01T00:00:00"
        assert row.end_time == "2024-03-02T00:00:00"

    def test_virtual_link_is_stored_as_meeting_link(self, db, sync):
        result = sync.ensure_calendar_event(
            _event(is_virtual=True, virtual_link="https://meet.example.com/abc")
        )

        row = db.get(CalendarEvent, result.id)
        assert row.is_virtual is True
        assert row.meeting_link == "https://meet.example.com/abc"

    def test_timezone_from_google_calendar(self, db, sync):
        db.add(GoogleCalendar(google_calendar_id="family@group.calendar", time_zone="Europe/London"))
        db.commit()

        result = sync.ensure_calendar_event(_event(google_calendar_id="family@group.calendar"))

        assert db.get(CalendarEvent, result.id).timezone == "Europe/London"

    def test_explicit_timezone_wins(self, db, sync):
        result = sync.ensure_calendar_event(
            _event(timezone="Asia/Tokyo", metadata={"timezone": "Europe/Paris"})
        )

        assert db.get(CalendarEvent, result.id).timezone == "Asia/Tokyo"

    def test_invalid_payload_is_a_result_not_an_exception(self, db, sync):
        result = sync.ensure_calendar_event(_event(start_time="not a date"))

        assert result.ok is False
        assert "start_time" in result.error
        assert db.query(CalendarEvent).count() == 0

    def test_metadata_with_wrong_type_is_rejected(self, sync):
        result = sync.ensure_calendar_event(_event(metadata={"duration_minutes": "an hour"}))

        assert result.ok is False
        assert "duration_minutes" in result.error

    def test_lost_insert_race_reuses_existing_row(self, db, sync):
        winner = sync.ensure_calendar_event(_event())

        # The loser's existence check ran before the winner committed
        real_get = sync.calendar_repository.get_by_source
        with patch.object(
            sync.calendar_repository,
            "get_by_source",
            side_effect=[None, real_get("health", "task-1")],
        ):
            loser = sync.ensure_calendar_event(_event(title="Dentist again"))

        assert loser.ok is True
        assert loser.existed is True
        assert loser.id == winner.id
        assert db.query(CalendarEvent).count() == 1

    def test_writes_pending_then_terminal_audit_rows(self, db, sync):
        sync.ensure_calendar_event(_event())

        rows = db.query(SyncAudit).filter(SyncAudit.request_id == "req-1").order_by(SyncAudit.id).all()
        assert [r.status for r in rows] == [SyncStatus.PENDING.value, SyncStatus.SUCCESS.value]
        assert rows[-1].target_table == "calendar_events"
        assert rows[-1].completed_at is not None

    def test_audit_failure_never_fails_the_sync(self, db, sync):
        sync.audit_repository = MagicMock()
        sync.audit_repository.create.side_effect = RuntimeError("audit table is gone")

        result = sync.ensure_calendar_event(_event())

        assert result.ok is True

    def test_remove_missing_event_is_not_an_error(self, sync):
        result = sync.remove_calendar_event("health", "never-existed")

        assert result.ok is True


class TestEnsurePasswordEntry:
    def test_upsert_by_source_reference(self, db):
        sync = SyncService(db, user_id="user-1")
        entry = {
            "title": "Pediatrics Portal",
            "url": "https://portal.example.com",
            "username": "parent",
            "password": "s3cret",
            "category": "health",
            "source": "medical_portal",
            "source_reference": "portal-1",
        }

        first = sync.ensure_password_entry(entry)
        second = sync.ensure_password_entry({**entry, "password": "n3w"})

        assert first.id == second.id
        assert second.existed is True
        row = db.get(PasswordEntry, first.id)
        assert row.password == "n3w"
        assert row.url == "https://portal.example.com"
        assert row.owner_id == "user-1"

    def test_identical_resave_stamps_updated_at(self, db):
        sync = SyncService(db, user_id="user-1")
        entry = {
            "title": "Vet Portal",
            "username": "parent",
            "password": "s3cret",
            "source": "pet_portal",
            "source_reference": "portal-2",
        }
        first = sync.ensure_password_entry(entry)
        row = db.get(PasswordEntry, first.id)
        row.updated_at = STALE
        db.commit()

        sync.ensure_password_entry(entry)

        db.refresh(row)
        assert row.updated_at.replace(tzinfo=None) > STALE.replace(tzinfo=None)


class TestEnsureDocument:
    def test_same_file_url_updates_existing_row(self, db):
        sync = SyncService(db, user_id="user-1")
        document = {
            "title": "Vaccination record",
            "file_url": "https://files.example.com/rex/vaccines.pdf",
            "file_type": "application/pdf",
            "category": "pets",
        }

        first = sync.ensure_document(document)
        second = sync.ensure_document({**document, "title": "Vaccination record 2024"})

        assert first.existed is False
        assert second.existed is True
        assert first.id == second.id
        assert db.query(Document).count() == 1
        assert db.get(Document, first.id).title == "Vaccination record 2024"

    def test_identical_resave_stamps_updated_at(self, db):
        sync = SyncService(db, user_id="user-1")
        document = {"title": "Passport scan", "file_url": "https://files.example.com/passport.pdf"}
        first = sync.ensure_document(document)
        row = db.get(Document, first.id)
        row.updated_at = STALE
        db.commit()

        sync.ensure_document(document)

        db.refresh(row)
        assert row.updated_at.replace(tzinfo=None) > STALE.replace(tzinfo=None)
