from fastapi import status

from familyhub.models.calendar_event import CalendarEvent

EVENT = {
    "event": {
        "title": "Soccer practice",
        "start_time": "2024-03-02T10:00:00",
        "end_time": "2024-03-02T11:00:00",
    }
}


class TestCSRFGate:
    def test_issue_token_sets_both_cookies(self, authorized_client):
        response = authorized_client.get("/api/security/csrf")

        assert response.status_code == status.HTTP_200_OK
        token = response.json()["token"]
        assert response.cookies.get("csrf-token") == token
        assert response.cookies.get("csrf-session")

    def test_token_is_reused_for_the_session(self, authorized_client):
        first = authorized_client.get("/api/security/csrf").json()["token"]
        second = authorized_client.get("/api/security/csrf").json()["token"]

        assert first == second

    def test_post_without_session_is_rejected(self, authorized_client, db):
        response = authorized_client.post(
            "/api/calendar-events", json=EVENT, headers={"x-csrf-token": "anything"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "No session found"}
        assert db.query(CalendarEvent).count() == 0

    def test_post_with_wrong_token_is_rejected(self, authorized_client, csrf_headers, db):
        response = authorized_client.post(
            "/api/calendar-events", json=EVENT, headers={"x-csrf-token": "forged"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "Invalid or missing CSRF token"}
        assert db.query(CalendarEvent).count() == 0

    def test_post_with_valid_token_passes(self, authorized_client, csrf_headers):
        response = authorized_client.post("/api/calendar-events", json=EVENT, headers=csrf_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["event"]["title"] == "Soccer practice"

    def test_cookie_token_alone_passes(self, authorized_client, csrf_headers):
        # The csrf-token cookie set by the token endpoint is still in the jar
        response = authorized_client.post("/api/calendar-events", json=EVENT)

        assert response.status_code == status.HTTP_200_OK

    def test_safe_methods_skip_the_check(self, authorized_client):
        response = authorized_client.get("/api/calendar-events")

        assert response.status_code == status.HTTP_200_OK

    def test_trusted_service_caller_bypasses_the_check(self, client, service_headers, db):
        response = client.post("/api/calendar-events", json=EVENT, headers=service_headers)

        assert response.status_code == status.HTTP_200_OK
        event = db.query(CalendarEvent).one()
        assert event.created_by == "service"

    def test_wrong_service_key_is_not_trusted(self, client, db):
        response = client.post(
            "/api/calendar-events", json=EVENT, headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "No session found"}

    def test_invalidated_token_no_longer_passes(self, authorized_client, csrf_headers):
        assert authorized_client.delete("/api/security/csrf", headers=csrf_headers).status_code == 200

        response = authorized_client.post("/api/calendar-events", json=EVENT, headers=csrf_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
