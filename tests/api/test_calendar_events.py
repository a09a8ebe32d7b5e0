from fastapi import status

from familyhub.models.calendar_event import CalendarEvent
from familyhub.models.sync_audit import SyncAudit


def _event(**overrides):
    event = {
        "title": "Piano lesson",
        "start_time": "2024-03-01T09:00:00",
        "end_time": "2024-03-01T10:00:00",
    }
    event.update(overrides)
    return {"event": event}


class TestCalendarEventsAPI:
    def test_create_event(self, authorized_client, csrf_headers):
        response = authorized_client.post(
            "/api/calendar-events",
            json=_event(attendee_ids=["member-1"], metadata={"notify_attendees": False}),
            headers=csrf_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        event = response.json()["event"]
        assert event["source"] == "calendar"
        assert event["source_reference"]
        assert event["start_time"] == "2024-03-01T09:00:00"
        assert event["end_time"] == "2024-03-01T10:00:00"
        assert event["attendee_ids"] == ["member-1"]
        assert event["metadata"] == {"notify_attendees": False}
        assert event["created_by"] == "user-1"

    def test_zero_length_event_is_repaired(self, authorized_client, csrf_headers):
        response = authorized_client.post(
            "/api/calendar-events",
            json=_event(end_time="2024-03-01T09:00:00"),
            headers=csrf_headers,
        )

        assert response.json()["event"]["end_time"] == "2024-03-01T10:00:00"

    def test_same_source_reference_updates_in_place(self, authorized_client, csrf_headers, db):
        first = authorized_client.post(
            "/api/calendar-events",
            json=_event(source="school", source_reference="term-1"),
            headers=csrf_headers,
        ).json()["event"]
        second = authorized_client.post(
            "/api/calendar-events",
            json=_event(title="Piano recital", source="school", source_reference="term-1"),
            headers=csrf_headers,
        ).json()["event"]

        assert first["id"] == second["id"]
        assert second["title"] == "Piano recital"
        assert db.query(CalendarEvent).count() == 1

    def test_request_id_is_echoed_and_audited(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/calendar-events",
            json=_event(),
            headers={**csrf_headers, "X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"
        statuses = [row.status for row in db.query(SyncAudit).filter_by(request_id="req-123").order_by(SyncAudit.id)]
        assert statuses == ["pending", "success"]

    def test_invalid_metadata_is_rejected(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/calendar-events",
            json=_event(metadata={"duration_minutes": "long"}),
            headers=csrf_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "validation_error"
        assert db.query(CalendarEvent).count() == 0

    def test_unparseable_start_is_rejected(self, authorized_client, csrf_headers):
        response = authorized_client.post(
            "/api/calendar-events", json=_event(start_time="next tuesday"), headers=csrf_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_list_events_in_range(self, authorized_client, csrf_headers):
        for day in ("01", "05", "09"):
            authorized_client.post(
                "/api/calendar-events",
                json=_event(
                    title=f"Lesson {day}",
                    start_time=f"2024-03-{day}T09:00:00",
                    end_time=f"2024-03-{day}T10:00:00",
                ),
                headers=csrf_headers,
            )

        response = authorized_client.get(
            "/api/calendar-events",
            params={"start": "2024-03-04T00:00:00", "end": "2024-03-08T00:00:00"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert [e["title"] for e in response.json()["events"]] == ["Lesson 05"]

    def test_update_merges_metadata(self, authorized_client, csrf_headers):
        created = authorized_client.post(
            "/api/calendar-events",
            json=_event(metadata={"color": "blue"}),
            headers=csrf_headers,
        ).json()["event"]

        response = authorized_client.put(
            f"/api/calendar-events/{created['id']}",
            json={"event": {"title": "Piano exam", "metadata": {"room": "B"}, "source": "hijack"}},
            headers=csrf_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        event = response.json()["event"]
        assert event["id"] == created["id"]
        assert event["title"] == "Piano exam"
        assert event["metadata"] == {"color": "blue", "room": "B"}
        assert event["source"] == "calendar"

    def test_delete_event(self, authorized_client, csrf_headers):
        created = authorized_client.post(
            "/api/calendar-events", json=_event(), headers=csrf_headers
        ).json()["event"]

        response = authorized_client.delete(
            f"/api/calendar-events/{created['id']}", headers=csrf_headers
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"ok": True, "id": created["id"]}

        response = authorized_client.get(f"/api/calendar-events/{created['id']}")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "resource_not_found"
