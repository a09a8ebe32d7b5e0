from unittest.mock import patch

from fastapi import status

from familyhub.models.calendar_event import CalendarEvent
from familyhub.models.document import Document
from familyhub.models.password import PasswordEntry
from familyhub.models.portal import Portal
from familyhub.models.task import Task
from familyhub.schemas.sync import SyncResult
from familyhub.services.sync_service import SyncService


def _calendar_event(db, source, source_reference):
    return (
        db.query(CalendarEvent)
        .filter_by(source=source, source_reference=source_reference)
        .one_or_none()
    )


class TestTravelAPI:
    FLIGHT = {
        "type": "flight",
        "airline": "Delta",
        "flight_number": "DL123",
        "departure_airport": "JFK",
        "arrival_airport": "LAX",
        "departure_time": "2024-05-01T08:00:00",
        "travelers": ["member-1"],
        "additional_attendees": "aunt@example.com",
    }

    def test_create_leg_with_calendar_event(self, authorized_client, csrf_headers, db):
        response = authorized_client.post("/api/travel-details", json=self.FLIGHT, headers=csrf_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        detail = body["detail"]
        assert detail["title"] == "Delta DL123 JFK to LAX"
        assert detail["travel_date"] == "2024-05-01"
        assert detail["departure_timezone"] == "America/New_York"
        assert detail["arrival_timezone"] == "America/Los_Angeles"
        assert detail["trip_id"]
        assert body["calendarEventId"] == detail["calendar_event_id"]

        event = _calendar_event(db, "travel", detail["id"])
        assert event.id == body["calendarEventId"]
        assert event.timezone == "America/New_York"
        assert event.end_time == "2024-05-01T09:00:00"
        assert event.attendees == ["aunt@example.com"]
        assert event.metadata_["trip_id"] == detail["trip_id"]

    def test_legs_of_one_trip(self, authorized_client, csrf_headers):
        outbound = authorized_client.post(
            "/api/travel-details", json={**self.FLIGHT, "trip_id": "trip-1"}, headers=csrf_headers
        ).json()["detail"]
        authorized_client.post(
            "/api/travel-details",
            json={
                **self.FLIGHT,
                "trip_id": "trip-1",
                "departure_airport": "LAX",
                "arrival_airport": "JFK",
                "departure_time": "2024-05-08T17:30:00",
            },
            headers=csrf_headers,
        )
        authorized_client.post("/api/travel-details", json=self.FLIGHT, headers=csrf_headers)

        response = authorized_client.get("/api/travel-details", params={"trip_id": "trip-1"})

        legs = response.json()
        assert len(legs) == 2
        assert outbound["id"] in [leg["id"] for leg in legs]

    def test_delete_leg_removes_event(self, authorized_client, csrf_headers, db):
        detail = authorized_client.post(
            "/api/travel-details", json=self.FLIGHT, headers=csrf_headers
        ).json()["detail"]

        response = authorized_client.delete(f"/api/travel-details/{detail['id']}", headers=csrf_headers)

        assert response.status_code == status.HTTP_200_OK
        assert _calendar_event(db, "travel", detail["id"]) is None


class TestHealthAPI:
    APPOINTMENT = {
        "title": "Annual checkup",
        "provider_name": "Smith",
        "appointment_type": "Checkup",
        "patient_ids": ["kid-1"],
        "appointment_date": "2024-03-01T09:00:00",
        "duration": 30,
        "additional_attendees_emails": "grandma@example.com",
    }

    def test_create_appointment(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/health/appointments", json=self.APPOINTMENT, headers=csrf_headers
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        task = db.get(Task, body["appointmentId"])
        assert task.category == "medical"
        assert task.metadata_["calendar_event_id"] == body["calendarEventId"]

        event = _calendar_event(db, "health", task.id)
        assert event.id == body["calendarEventId"]
        assert event.end_time == "2024-03-01T09:30:00"
        assert event.attendees == ["grandma@example.com"]
        assert "Provider: Dr. Smith" in event.description

    def test_failed_calendar_sync_rolls_back_task(self, authorized_client, csrf_headers, db):
        failed = SyncResult(ok=False, error="Calendar unavailable")
        with patch.object(SyncService, "ensure_calendar_event", return_value=failed):
            response = authorized_client.post(
                "/api/health/appointments",
                json=self.APPOINTMENT,
                headers={**csrf_headers, "X-Request-ID": "req-fail"},
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error"] == "sync_failed"
        assert body["message"] == "Failed to sync calendar event: Calendar unavailable"
        assert body["details"] == {"failed_step": "calendar", "request_id": "req-fail"}
        assert db.query(Task).count() == 0
        assert db.query(CalendarEvent).count() == 0

        audit = authorized_client.get("/api/sync-audit", params={"request_id": "req-fail"}).json()
        rolled_back = [row for row in audit if row["status"] == "rolled_back"]
        assert len(rolled_back) == 1
        assert rolled_back[0]["source_table"] == "tasks"
        assert rolled_back[0]["metadata"] == {"failed_step": "calendar"}

    def test_appointment_without_calendar(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/health/appointments",
            json={**self.APPOINTMENT, "sync_to_calendar": False},
            headers=csrf_headers,
        )

        assert response.json()["calendarEventId"] is None
        assert db.query(CalendarEvent).count() == 0

    def test_delete_appointment(self, authorized_client, csrf_headers, db):
        body = authorized_client.post(
            "/api/health/appointments", json=self.APPOINTMENT, headers=csrf_headers
        ).json()

        response = authorized_client.delete(
            f"/api/health/appointments/{body['appointmentId']}", headers=csrf_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert db.query(Task).count() == 0
        assert db.query(CalendarEvent).count() == 0

    def test_delete_unknown_appointment(self, authorized_client, csrf_headers):
        response = authorized_client.delete("/api/health/appointments/nope", headers=csrf_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDoctorsAPI:
    DOCTOR = {
        "name": "Dr. Rivera",
        "specialty": "Pediatrics",
        "patient_ids": ["kid-1"],
        "portal_url": "https://portal.clinic.example.com",
        "portal_username": "parent",
        "portal_password": "s3cret",
    }

    def test_doctor_portal_becomes_password_entry(self, authorized_client, csrf_headers, db):
        response = authorized_client.post("/api/health/doctors", json=self.DOCTOR, headers=csrf_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["doctor"]["portal_id"] == body["portalId"]
        assert "portal_password" not in body["doctor"]

        portal = db.get(Portal, body["portalId"])
        assert portal.portal_name == "Dr. Rivera Portal"
        assert portal.doctor_id == body["doctor"]["id"]

        entry = db.get(PasswordEntry, body["passwordId"])
        assert (entry.source, entry.source_reference) == ("medical_portal", portal.id)
        assert entry.password == "s3cret"
        assert entry.category == "health"

    def test_doctor_without_portal(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/health/doctors", json={"name": "Dr. Lee"}, headers=csrf_headers
        )

        assert response.json()["portalId"] is None
        assert db.query(Portal).count() == 0

    def test_update_doctor_updates_portal_login(self, authorized_client, csrf_headers, db):
        doctor = authorized_client.post(
            "/api/health/doctors", json=self.DOCTOR, headers=csrf_headers
        ).json()

        response = authorized_client.put(
            f"/api/health/doctors/{doctor['doctor']['id']}",
            json={"portal_password": "n3w"},
            headers=csrf_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["passwordId"] == doctor["passwordId"]
        assert db.get(PasswordEntry, doctor["passwordId"]).password == "n3w"
        assert db.query(Portal).count() == 1

    def test_failed_password_sync_restores_portal_on_update(self, authorized_client, csrf_headers, db):
        doctor = authorized_client.post(
            "/api/health/doctors", json=self.DOCTOR, headers=csrf_headers
        ).json()

        failed = SyncResult(ok=False, error="Vault unavailable")
        with patch.object(SyncService, "ensure_password_entry", return_value=failed):
            response = authorized_client.put(
                f"/api/health/doctors/{doctor['doctor']['id']}",
                json={"portal_url": "https://new.clinic.example.com", "portal_password": "n3w"},
                headers=csrf_headers,
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["details"]["failed_step"] == "password"

        db.expire_all()
        portal = db.get(Portal, doctor["portalId"])
        assert portal.portal_url == "https://portal.clinic.example.com"
        assert portal.password == "s3cret"
        assert db.get(PasswordEntry, doctor["passwordId"]).password == "s3cret"

    def test_failed_password_sync_drops_portal_added_on_update(
        self, authorized_client, csrf_headers, db
    ):
        doctor = authorized_client.post(
            "/api/health/doctors", json={"name": "Dr. Lee"}, headers=csrf_headers
        ).json()

        failed = SyncResult(ok=False, error="Vault unavailable")
        with patch.object(SyncService, "ensure_password_entry", return_value=failed):
            response = authorized_client.put(
                f"/api/health/doctors/{doctor['doctor']['id']}",
                json={"portal_username": "parent", "portal_password": "s3cret"},
                headers=csrf_headers,
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert db.query(Portal).count() == 0
        assert db.query(PasswordEntry).count() == 0

    def test_delete_doctor_removes_portal_and_password(self, authorized_client, csrf_headers, db):
        doctor = authorized_client.post(
            "/api/health/doctors", json=self.DOCTOR, headers=csrf_headers
        ).json()

        response = authorized_client.delete(
            f"/api/health/doctors/{doctor['doctor']['id']}", headers=csrf_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert db.query(Portal).count() == 0
        assert db.query(PasswordEntry).count() == 0

    def test_list_doctors(self, authorized_client, csrf_headers):
        authorized_client.post("/api/health/doctors", json={"name": "Dr. Lee"}, headers=csrf_headers)

        response = authorized_client.get("/api/health/doctors")

        assert [d["name"] for d in response.json()] == ["Dr. Lee"]


class TestPetsAPI:
    def test_create_and_delete_appointment(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/pets/appointments",
            json={
                "title": "Rabies shot",
                "pet_ids": ["rex"],
                "vet_name": "Dr. Paws",
                "appointment_date": "2024-04-01T10:00:00",
            },
            headers=csrf_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        event = _calendar_event(db, "pets", body["taskId"])
        assert event.id == body["calendarEventId"]
        assert event.metadata_["pet_ids"] == ["rex"]
        assert "Vet: Dr. Paws" in event.description

        response = authorized_client.delete(
            f"/api/pets/appointments/{body['taskId']}", headers=csrf_headers
        )
        assert response.status_code == status.HTTP_200_OK
        assert db.query(CalendarEvent).count() == 0

    def test_health_task_is_not_a_pet_appointment(self, authorized_client, csrf_headers):
        task_id = authorized_client.post(
            "/api/health/appointments", json=TestHealthAPI.APPOINTMENT, headers=csrf_headers
        ).json()["appointmentId"]

        response = authorized_client.delete(f"/api/pets/appointments/{task_id}", headers=csrf_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAcademicsAPI:
    EVENT = {
        "event_title": "Science fair",
        "event_date": "2024-04-10T18:00:00",
        "attendees": ["kid-1"],
        "parent_ids": ["user-1"],
        "additional_attendees": "ms.lee@school.edu",
        "location": "Lincoln Elementary",
    }

    def test_create_event(self, authorized_client, csrf_headers):
        response = authorized_client.post("/api/academic-events", json=self.EVENT, headers=csrf_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["event"]["student_ids"] == ["kid-1"]
        assert body["event"]["calendar_event_id"] == body["calendarEvent"]["id"]
        assert body["calendarEvent"]["category"] == "education"
        assert body["calendarEvent"]["attendee_ids"] == ["kid-1", "user-1"]
        assert body["calendarEvent"]["attendees"] == ["ms.lee@school.edu"]

    def test_calendar_mirror_can_be_disabled(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/academic-events",
            json={**self.EVENT, "syncToCalendar": False},
            headers=csrf_headers,
        )

        assert response.json()["calendarEvent"] is None
        assert db.query(CalendarEvent).count() == 0


class TestPortalsAPI:
    PORTAL = {
        "portal_type": "academic",
        "portal_name": "District portal",
        "portal_url": "https://district.example.com",
        "username": "parent",
        "password": "hunter2",
    }

    def test_create_portal_with_password(self, authorized_client, csrf_headers, db):
        response = authorized_client.post("/api/portals", json=self.PORTAL, headers=csrf_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        entry = db.get(PasswordEntry, body["passwordId"])
        assert (entry.source, entry.source_reference) == ("academic_portal", body["portal"]["id"])
        assert entry.title == "District portal"
        assert entry.category == "education"

    def test_portal_without_credentials_has_no_entry(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/portals",
            json={"portal_type": "pet", "portal_name": "Vet portal"},
            headers=csrf_headers,
        )

        assert response.json()["passwordId"] is None
        assert db.query(PasswordEntry).count() == 0

    def test_clearing_password_removes_entry(self, authorized_client, csrf_headers, db):
        portal_id = authorized_client.post(
            "/api/portals", json=self.PORTAL, headers=csrf_headers
        ).json()["portal"]["id"]

        response = authorized_client.put(
            f"/api/portals/{portal_id}", json={"password": None}, headers=csrf_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["passwordId"] is None
        assert db.query(PasswordEntry).count() == 0

    def test_failed_password_sync_restores_portal_on_update(self, authorized_client, csrf_headers, db):
        portal_id = authorized_client.post(
            "/api/portals", json=self.PORTAL, headers=csrf_headers
        ).json()["portal"]["id"]

        failed = SyncResult(ok=False, error="Vault unavailable")
        with patch.object(SyncService, "ensure_password_entry", return_value=failed):
            response = authorized_client.put(
                f"/api/portals/{portal_id}",
                json={"portal_url": "https://new.district.example.com", "password": "n3w"},
                headers=csrf_headers,
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        db.expire_all()
        portal = db.get(Portal, portal_id)
        assert portal.portal_url == "https://district.example.com"
        assert portal.password == "hunter2"

    def test_unknown_portal_type_is_rejected(self, authorized_client, csrf_headers):
        response = authorized_client.post(
            "/api/portals", json={**self.PORTAL, "portal_type": "bank"}, headers=csrf_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "portal_type" in response.json()["details"]


class TestDocumentsAPI:
    def test_save_document_upserts_by_url(self, authorized_client, csrf_headers, db):
        document = {
            "title": "Passport scan",
            "file_url": "https://files.example.com/passport.pdf",
            "category": "travel",
            "file_size": 1024,
        }

        first = authorized_client.post("/api/documents", json=document, headers=csrf_headers).json()
        second = authorized_client.post(
            "/api/documents", json={**document, "title": "Passport (renewed)"}, headers=csrf_headers
        ).json()

        assert first["existed"] is False
        assert second["existed"] is True
        assert second["document"]["id"] == first["document"]["id"]
        assert second["document"]["title"] == "Passport (renewed)"
        assert db.query(Document).count() == 1

    def test_list_and_delete_documents(self, authorized_client, csrf_headers):
        for name, category in (("a", "travel"), ("b", "medical")):
            authorized_client.post(
                "/api/documents",
                json={"title": name, "file_url": f"https://files.example.com/{name}", "category": category},
                headers=csrf_headers,
            )

        travel = authorized_client.get("/api/documents", params={"category": "travel"}).json()
        assert [d["title"] for d in travel] == ["a"]

        response = authorized_client.delete(f"/api/documents/{travel[0]['id']}", headers=csrf_headers)
        assert response.status_code == status.HTTP_200_OK

        response = authorized_client.delete(f"/api/documents/{travel[0]['id']}", headers=csrf_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestSyncAuditAPI:
    def test_rows_of_one_request(self, authorized_client, csrf_headers):
        authorized_client.post(
            "/api/pets/appointments",
            json={"title": "Grooming", "pet_ids": ["rex"], "appointment_date": "2024-04-02T10:00:00"},
            headers={**csrf_headers, "X-Request-ID": "req-pets"},
        )

        response = authorized_client.get("/api/sync-audit", params={"request_id": "req-pets"})

        assert response.status_code == status.HTTP_200_OK
        rows = response.json()
        assert {row["request_id"] for row in rows} == {"req-pets"}
        assert [row["status"] for row in rows] == ["pending", "success"]
        assert rows[1]["target_table"] == "calendar_events"
