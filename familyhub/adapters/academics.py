from typing import Any, Dict, Mapping

from familyhub.adapters.base import (
    EventAdapter,
    EventAdapterResult,
    ValidationResult,
    notify_attendees_flag,
    split_attendees,
)
from familyhub.core.constants import EventType
from familyhub.schemas.events import AcademicsEventForm


class AcademicsEventAdapter(EventAdapter):
    type = EventType.ACADEMICS
    label = "School Event"
    form_class = AcademicsEventForm
    endpoint = "/academic-events"
    failure_message = "Failed to create academic event"

    def validate_fields(self, form: AcademicsEventForm) -> ValidationResult:
        errors = []
        self.require_common(form, errors)
        return ValidationResult(valid=not errors, errors=errors)

    def map_to_api_payload(self, form: AcademicsEventForm) -> Dict[str, Any]:
        external_emails = split_attendees(form.other_participants) + split_attendees(
            form.attendees
        )
        return {
            "event_title": form.title,
            "notes": form.notes or form.description,
            "event_type": form.event_type or "Meeting",
            "event_date": self.start_of(form),
            "end_time": self.end_of(form),
            "location": form.location or form.school_name or "",
            # Student ids
            "attendees": form.student_ids,
            "parent_ids": form.parent_ids,
            "additional_attendees": ",".join(external_emails),
            "syncToCalendar": True,
            "google_calendar_id": form.google_calendar_id,
            "google_sync_enabled": True,
            "notify_attendees": notify_attendees_flag(form),
        }

    def interpret(self, body: Mapping[str, Any]) -> EventAdapterResult:
        return EventAdapterResult(
            success=True,
            domain_id=(body.get("event") or {}).get("id"),
            calendar_event_id=(body.get("calendarEvent") or {}).get("id"),
        )
