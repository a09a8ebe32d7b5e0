from typing import Any, Dict, Mapping

from familyhub.adapters.base import (
    EventAdapter,
    EventAdapterResult,
    ValidationResult,
    notify_attendees_flag,
    split_attendees,
)
from familyhub.core.constants import EventType
from familyhub.schemas.events import PetsEventForm


class PetsEventAdapter(EventAdapter):
    type = EventType.PETS
    label = "Pet Appointment"
    form_class = PetsEventForm
    endpoint = "/pets/appointments"
    failure_message = "Failed to create pet appointment"

    def validate_fields(self, form: PetsEventForm) -> ValidationResult:
        errors = []
        self.require_common(form, errors)
        if not form.pet_ids:
            errors.append("Please select at least one pet")
        return ValidationResult(valid=not errors, errors=errors)

    def map_to_api_payload(self, form: PetsEventForm) -> Dict[str, Any]:
        return {
            "pet_ids": form.pet_ids,
            "appointment_type": form.appointment_type or "checkup",
            "vet_id": form.vet_id,
            "vet_name": form.vet_name,
            "title": form.title,
            "description": form.notes or form.description,
            "appointment_date": self.start_of(form),
            "end_time": self.end_of(form),
            "location": form.location,
            "attendee_ids": form.owner_attendee_ids,
            "sync_to_calendar": True,
            "google_calendar_id": form.google_calendar_id,
            "send_invites": form.send_invites,
            "additional_attendees_emails": split_attendees(form.attendees),
            "notify_attendees": notify_attendees_flag(form),
        }

    def interpret(self, body: Mapping[str, Any]) -> EventAdapterResult:
        return EventAdapterResult(
            success=True,
            domain_id=body.get("taskId"),
            calendar_event_id=body.get("calendarEventId"),
            google_synced=bool((body.get("googleSync") or {}).get("ok")),
        )
