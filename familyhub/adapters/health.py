from typing import Any, Dict, Mapping

from familyhub.adapters.base import (
    EventAdapter,
    EventAdapterResult,
    ValidationResult,
    notify_attendees_flag,
    split_attendees,
)
from familyhub.core.constants import EventType
from familyhub.schemas.events import HealthEventForm


class HealthEventAdapter(EventAdapter):
    """Medical appointments: one task plus its calendar event."""

    type = EventType.HEALTH
    label = "Medical Appointment"
    form_class = HealthEventForm
    endpoint = "/health/appointments"
    failure_message = "Failed to create medical appointment"

    def validate_fields(self, form: HealthEventForm) -> ValidationResult:
        errors = []
        self.require_common(form, errors)
        if not form.provider_name and not form.provider_id:
            errors.append("Please select a healthcare provider")
        return ValidationResult(valid=not errors, errors=errors)

    def map_to_api_payload(self, form: HealthEventForm) -> Dict[str, Any]:
        return {
            "provider_id": form.provider_id,
            "provider_name": form.provider_name,
            "appointment_type": form.appointment_type or "checkup",
            "patient_ids": form.patient_ids,
            "attendee_ids": form.parent_attendee_ids,
            "title": form.title,
            "description": form.notes or form.description,
            "appointment_date": self.start_of(form),
            "end_time": self.end_of(form),
            "duration": form.duration or 60,
            "location": form.location,
            "is_virtual": bool(form.is_virtual),
            "virtual_link": form.virtual_link,
            "sync_to_calendar": True,
            "google_calendar_id": form.google_calendar_id,
            "send_invites": form.send_invites,
            "additional_attendees_emails": split_attendees(form.attendees),
            "notify_attendees": notify_attendees_flag(form),
        }

    def interpret(self, body: Mapping[str, Any]) -> EventAdapterResult:
        return EventAdapterResult(
            success=True,
            domain_id=body.get("appointmentId"),
            calendar_event_id=body.get("calendarEventId"),
            google_synced=bool((body.get("googleSync") or {}).get("ok")),
        )
