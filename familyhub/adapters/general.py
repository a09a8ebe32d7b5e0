from typing import Any, Dict, Mapping

from familyhub.adapters.base import (
    EventAdapter,
    EventAdapterResult,
    ValidationResult,
    notify_attendees_flag,
    split_attendees,
)
from familyhub.core.constants import EventSource, EventType
from familyhub.schemas.events import EventForm


class GeneralEventAdapter(EventAdapter):
    """Plain calendar events, posted to the calendar events API."""

    type = EventType.GENERAL
    label = "General Event"
    form_class = EventForm
    endpoint = "/calendar-events"
    failure_message = "Failed to create event"

    def validate_fields(self, form: EventForm) -> ValidationResult:
        errors = []
        self.require_common(form, errors)
        if not form.end_date:
            errors.append("End date is required")
        return ValidationResult(valid=not errors, errors=errors)

    def map_to_api_payload(self, form: EventForm) -> Dict[str, Any]:
        external_emails = split_attendees(form.attendees)
        notify = notify_attendees_flag(form)

        metadata: Dict[str, Any] = {"additional_attendees": external_emails}
        if notify is not None:
            metadata["notify_attendees"] = notify

        return {
            "title": form.title,
            "description": form.description,
            "start_time": self.start_of(form),
            "end_time": self.end_of(form),
            "all_day": form.all_day,
            "location": form.location,
            "is_virtual": form.is_virtual,
            "virtual_link": form.virtual_link,
            "attendee_ids": form.participant_ids,
            "attendees": external_emails,
            "google_calendar_id": form.google_calendar_id,
            "reminder_minutes": form.reminder_minutes,
            "category": form.category or "other",
            "source": EventSource.CALENDAR,
            "sync_to_google": bool(form.google_calendar_id),
            "metadata": metadata,
        }

    def wrap(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"event": payload}

    def interpret(self, body: Mapping[str, Any]) -> EventAdapterResult:
        event_id = (body.get("event") or {}).get("id")
        return EventAdapterResult(success=True, domain_id=event_id, calendar_event_id=event_id)
