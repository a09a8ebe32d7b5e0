import logging
from typing import Any, Dict, Mapping, Optional, Union

from familyhub.adapters.base import (
    AdapterRequestError,
    EventAdapter,
    EventAdapterResult,
    ValidationResult,
    notify_attendees_flag,
    split_attendees,
)
from familyhub.core.constants import EventType, StepType
from familyhub.schemas.events import EventForm, TravelEventForm
from familyhub.security.csrf_client import CSRFClient
from familyhub.services.composite_operation import CompositeOperation
from familyhub.utils.airports import timezone_for_airport
from familyhub.utils.datetimes import build_event_datetime

logger = logging.getLogger(__name__)


def _leg_id(body: Mapping[str, Any]) -> Optional[str]:
    detail = body.get("detail") or body.get("travelDetail") or {}
    return detail.get("id") or body.get("travelDetailId")


def _calendar_id(body: Mapping[str, Any]) -> Optional[str]:
    return body.get("calendarEventId") or (body.get("calendarEvent") or {}).get("id")


class TravelEventAdapter(EventAdapter):
    """
    Trip legs. A form with a return date and time produces two legs that
    share one trip id.

    With ``atomic_legs`` (the default) a failed return leg deletes the
    outbound leg again. Without it the outbound leg is kept and the result
    is still successful.
    """

    type = EventType.TRAVEL
    label = "Travel"
    form_class = TravelEventForm
    endpoint = "/travel-details"
    failure_message = "Failed to create travel event"

    def __init__(self, client: Optional[CSRFClient] = None, atomic_legs: bool = True):
        super().__init__(client)
        self.atomic_legs = atomic_legs

    def validate_fields(self, form: TravelEventForm) -> ValidationResult:
        errors = []
        if not form.title.strip():
            errors.append("Title is required")
        if not form.departure_date:
            errors.append("Departure date is required")
        if not form.departure_time:
            errors.append("Departure time is required")

        if form.vehicle_type == "flight":
            if not form.airline:
                errors.append("Airline is required for flights")
            if not form.flight_number:
                errors.append("Flight number is required")
            if not form.departure_airport:
                errors.append("Departure airport is required")
            if not form.arrival_airport:
                errors.append("Arrival airport is required")
        return ValidationResult(valid=not errors, errors=errors)

    def map_to_api_payload(self, form: TravelEventForm) -> Dict[str, Any]:
        """Payload of the outbound leg."""
        external_emails = split_attendees(form.other_travelers) + split_attendees(form.attendees)
        arrival = None
        if form.arrival_date:
            arrival = build_event_datetime(form.arrival_date, form.arrival_time, False)

        payload = {
            "title": form.title,
            "description": form.description,
            "type": form.vehicle_type or "other",
            "departure_time": build_event_datetime(form.departure_date, form.departure_time, False),
            # Without an arrival the calendar end is derived server side
            "arrival_time": arrival,
            "airline": form.airline,
            "flight_number": form.flight_number,
            "departure_airport": form.departure_airport,
            "arrival_airport": form.arrival_airport,
            "confirmation_number": form.confirmation_number,
            "attendee_ids": form.travelers,
            "travelers": form.travelers,
            "attendees": external_emails,
            "additional_attendees": external_emails,
            "accommodation_name": form.accommodation_name,
            "accommodation_type": form.accommodation_type,
            "location": form.location,
            "notes": form.description,
            "trip_id": form.trip_id,
            "google_sync_enabled": bool(form.google_calendar_id),
            "google_calendar_id": form.google_calendar_id,
            "send_invites": form.send_invites,
            "notify_attendees": notify_attendees_flag(form),
        }
        self._attach_timezones(payload)
        return payload

    def map_return_leg(
        self, form: TravelEventForm, outbound: Dict[str, Any], trip_id: Optional[str]
    ) -> Dict[str, Any]:
        inbound = {
            **outbound,
            "departure_airport": outbound.get("arrival_airport"),
            "arrival_airport": outbound.get("departure_airport"),
            "departure_time": build_event_datetime(form.return_date, form.return_time, False),
            "arrival_time": None,
            "trip_id": trip_id or outbound.get("trip_id"),
        }
        self._attach_timezones(inbound)
        return inbound

    @staticmethod
    def _attach_timezones(payload: Dict[str, Any]) -> None:
        for side in ("departure", "arrival"):
            airport = payload.get(f"{side}_airport")
            payload[f"{side}_timezone"] = timezone_for_airport(airport) if airport else None

    def interpret(self, body: Mapping[str, Any]) -> EventAdapterResult:
        return EventAdapterResult(
            success=True, domain_id=_leg_id(body), calendar_event_id=_calendar_id(body)
        )

    async def _delete_leg(self, body: Mapping[str, Any]) -> None:
        leg_id = _leg_id(body)
        if not leg_id:
            return
        response = await self.client.delete(f"{self.url}/{leg_id}")
        if response.is_error:
            raise AdapterRequestError(
                f"Failed to delete travel leg {leg_id}", response.status_code
            )

    async def create_event(
        self, data: Union[EventForm, Mapping[str, Any]]
    ) -> EventAdapterResult:
        form, failed = self.check(data)
        if failed is not None:
            return failed

        try:
            outbound = self.map_to_api_payload(form)
        except ValueError as e:
            return EventAdapterResult(success=False, error=f"Invalid date or time: {e}", errors=[str(e)])
        legs: Dict[str, Any] = {}

        async def create_outbound() -> Dict[str, Any]:
            legs["outbound"] = await self.post(outbound)
            return legs["outbound"]

        async def create_return() -> Dict[str, Any]:
            trip_id = (legs["outbound"].get("detail") or {}).get("trip_id")
            return await self.post(self.map_return_leg(form, outbound, trip_id))

        operation = CompositeOperation().add_step(
            StepType.CUSTOM,
            create_outbound,
            self._delete_leg if self.atomic_legs else None,
            name="outbound leg",
        )
        if form.has_return_leg:
            operation.add_step(StepType.CUSTOM, create_return, name="return leg")

        result = await operation.execute()

        if not result.ok:
            if "outbound" in legs and not self.atomic_legs:
                logger.warning(f"Return leg failed, keeping outbound leg: {result.error}")
                return self.interpret(legs["outbound"])
            return EventAdapterResult(success=False, error=result.error or self.failure_message)

        return self.interpret(legs["outbound"])
