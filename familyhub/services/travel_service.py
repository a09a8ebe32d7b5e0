import logging
import uuid
from typing import Any, Dict, List, Optional

from familyhub.core.constants import EventSource, StepType
from familyhub.core.exceptions import ResourceNotFoundException
from familyhub.models.travel import TravelDetail
from familyhub.repositories.domain_repositories import TravelDetailRepository
from familyhub.schemas.domain import (
    TravelDetail as TravelDetailOut,
    TravelDetailCreate,
    TravelDetailResponse,
)
from familyhub.services.composite_operation import CompositeOperation
from familyhub.services.domain_service import DomainSyncService, check_removed
from familyhub.services.sync_service import require_ok
from familyhub.utils.airports import timezone_for_airport
from familyhub.utils.datetimes import travel_date_of

# Set up module logger
logger = logging.getLogger(__name__)


def _infer_timezone(explicit: Optional[str], airport: Optional[str]) -> Optional[str]:
    if explicit:
        return explicit
    return timezone_for_airport(airport) if airport else None


def _leg_title(data: TravelDetailCreate) -> str:
    if data.title:
        return data.title
    if data.type == "flight" and data.airline:
        route = " ".join(part for part in (data.airline, data.flight_number) if part)
        if data.departure_airport and data.arrival_airport:
            route += f" {data.departure_airport} to {data.arrival_airport}"
        return route
    if data.departure_airport and data.arrival_airport:
        return f"{data.type}: {data.departure_airport} to {data.arrival_airport}"
    return f"Travel: {data.type}"


class TravelService(DomainSyncService):
    """Trip legs, one calendar event per leg."""

    source_table = "travel_details"

    def __init__(self, db):
        super().__init__(db)
        self.repository = TravelDetailRepository(db)

    async def get_detail(self, detail_id: str) -> TravelDetail:
        detail = self.repository.get(detail_id)
        if not detail:
            raise ResourceNotFoundException(f"Travel detail {detail_id} not found")
        return detail

    async def list_details(self, trip_id: Optional[str] = None) -> List[TravelDetail]:
        if trip_id:
            return self.repository.list_for_trip(trip_id)
        return self.repository.list()

    async def create_detail(
        self,
        user_id: Optional[str],
        data: TravelDetailCreate,
        request_id: Optional[str] = None,
    ) -> TravelDetailResponse:
        sync = self.sync_service(user_id, request_id)
        departure_tz = _infer_timezone(data.departure_timezone, data.departure_airport)
        arrival_tz = _infer_timezone(data.arrival_timezone, data.arrival_airport)
        traveler_ids = data.attendee_ids or data.travelers
        external = data.additional_attendees or data.attendees
        state: Dict[str, Any] = {}

        def create_leg() -> TravelDetail:
            state["detail"] = self.repository.create(
                {
                    "trip_id": data.trip_id or str(uuid.uuid4()),
                    "type": data.type,
                    "title": _leg_title(data),
                    "travel_date": travel_date_of(data.departure_time),
                    "departure_time": data.departure_time,
                    "arrival_time": data.arrival_time,
                    "departure_timezone": departure_tz,
                    "arrival_timezone": arrival_tz,
                    "airline": data.airline,
                    "flight_number": data.flight_number,
                    "departure_airport": data.departure_airport,
                    "arrival_airport": data.arrival_airport,
                    "confirmation_number": data.confirmation_number,
                    "accommodation_name": data.accommodation_name,
                    "accommodation_type": data.accommodation_type,
                    "location": data.location,
                    "notes": data.notes or data.description,
                    "traveler_ids": traveler_ids,
                    "additional_attendees": external,
                    "created_by": user_id,
                }
            )
            return state["detail"]

        def ensure_event() -> str:
            detail = state["detail"]
            description = " ".join(
                part for part in (data.airline or data.type, data.flight_number) if part
            )
            if data.confirmation_number:
                description += f"\nConfirmation: {data.confirmation_number}"
            result = sync.ensure_calendar_event(
                {
                    "title": detail.title,
                    "description": description,
                    "start_time": data.departure_time,
                    "end_time": data.arrival_time,
                    "all_day": False,
                    "category": "travel",
                    "location": data.location or data.departure_airport,
                    "source": EventSource.TRAVEL,
                    "source_reference": detail.id,
                    "attendee_ids": traveler_ids,
                    "attendees": external,
                    "google_calendar_id": data.google_calendar_id,
                    "timezone": departure_tz,
                    "metadata": {
                        "additional_attendees": external,
                        "notify_attendees": data.notify_attendees is not False,
                        "trip_id": detail.trip_id,
                        "confirmation_number": data.confirmation_number,
                        "airline": data.airline,
                        "flight_number": data.flight_number,
                        "departure_timezone": departure_tz,
                        "arrival_timezone": arrival_tz,
                    },
                }
            )
            state["calendar_event_id"] = require_ok(result, "calendar event")
            return state["calendar_event_id"]

        def remove_event(_: Any) -> None:
            check_removed(
                sync.remove_calendar_event(EventSource.TRAVEL, state["detail"].id),
                "calendar event",
            )

        def link_event() -> TravelDetail:
            return self.repository.update(
                state["detail"], {"calendar_event_id": state["calendar_event_id"]}
            )

        operation = (
            CompositeOperation(sync.request_id)
            .add_step(StepType.CUSTOM, create_leg, lambda d: self.repository.delete(d.id), name="travel leg")
            .add_step(StepType.CALENDAR, ensure_event, remove_event)
            .add_step(StepType.CUSTOM, link_event, name="link calendar event")
        )
        await self.run(operation, sync, source_id=lambda: getattr(state.get("detail"), "id", None))

        return TravelDetailResponse(
            detail=TravelDetailOut.model_validate(state["detail"]),
            calendarEventId=state["calendar_event_id"],
        )

    async def delete_detail(
        self, user_id: Optional[str], detail_id: str, request_id: Optional[str] = None
    ) -> None:
        detail = await self.get_detail(detail_id)
        sync = self.sync_service(user_id, request_id)
        check_removed(sync.remove_calendar_event(EventSource.TRAVEL, detail.id), "calendar event")
        self.repository.delete(detail.id)
