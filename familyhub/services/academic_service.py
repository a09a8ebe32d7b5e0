import logging
from typing import Any, Dict, Optional

from familyhub.core.constants import EventSource, StepType
from familyhub.core.exceptions import ResourceNotFoundException
from familyhub.models.academic_event import AcademicEvent
from familyhub.repositories.calendar_event_repository import CalendarEventRepository
from familyhub.repositories.domain_repositories import AcademicEventRepository
from familyhub.schemas.calendar_event import CalendarEvent as CalendarEventOut
from familyhub.schemas.domain import (
    AcademicEvent as AcademicEventOut,
    AcademicEventCreate,
    AcademicEventResponse,
)
from familyhub.services.composite_operation import CompositeOperation
from familyhub.services.domain_service import DomainSyncService, check_removed
from familyhub.services.sync_service import require_ok

# Set up module logger
logger = logging.getLogger(__name__)

CALENDAR_CATEGORY = "education"


class AcademicService(DomainSyncService):
    source_table = "academic_events"

    def __init__(self, db):
        super().__init__(db)
        self.repository = AcademicEventRepository(db)
        self.calendar_repository = CalendarEventRepository(db)

    async def create_event(
        self,
        user_id: Optional[str],
        data: AcademicEventCreate,
        request_id: Optional[str] = None,
    ) -> AcademicEventResponse:
        sync = self.sync_service(user_id, request_id)
        state: Dict[str, Any] = {}

        def create_row() -> AcademicEvent:
            state["event"] = self.repository.create(
                {
                    "event_title": data.event_title,
                    "event_type": data.event_type,
                    "event_date": data.event_date,
                    "end_time": data.end_time,
                    "location": data.location,
                    "notes": data.notes,
                    "student_ids": data.attendees,
                    "parent_ids": data.parent_ids,
                    "additional_attendees": data.additional_attendees,
                    "created_by": user_id,
                }
            )
            return state["event"]

        def ensure_calendar_event() -> str:
            event = state["event"]
            result = sync.ensure_calendar_event(
                {
                    "title": data.event_title,
                    "description": data.notes,
                    "start_time": data.event_date,
                    "end_time": data.end_time,
                    "all_day": False,
                    "location": data.location,
                    "category": CALENDAR_CATEGORY,
                    "source": EventSource.ACADEMICS,
                    "source_reference": event.id,
                    "attendee_ids": [*data.attendees, *data.parent_ids],
                    "attendees": data.additional_attendees,
                    "google_calendar_id": data.google_calendar_id,
                    "metadata": {
                        "event_type": data.event_type,
                        "student_ids": data.attendees,
                        "parent_ids": data.parent_ids,
                        "additional_attendees": data.additional_attendees,
                        "notify_attendees": data.notify_attendees is not False,
                    },
                }
            )
            state["calendar_event_id"] = require_ok(result, "calendar event")
            return state["calendar_event_id"]

        def remove_calendar_event(_: Any) -> None:
            check_removed(
                sync.remove_calendar_event(EventSource.ACADEMICS, state["event"].id),
                "calendar event",
            )

        def link_event() -> AcademicEvent:
            return self.repository.update(
                state["event"], {"calendar_event_id": state["calendar_event_id"]}
            )

        operation = CompositeOperation(sync.request_id).add_step(
            StepType.CUSTOM, create_row, lambda e: self.repository.delete(e.id), name="academic event"
        )
        if data.sync_to_calendar:
            operation.add_step(StepType.CALENDAR, ensure_calendar_event, remove_calendar_event)
            operation.add_step(StepType.CUSTOM, link_event, name="link calendar event")

        await self.run(operation, sync, source_id=lambda: getattr(state.get("event"), "id", None))

        calendar_event = None
        if state.get("calendar_event_id"):
            calendar_event = CalendarEventOut.model_validate(
                self.calendar_repository.get(state["calendar_event_id"])
            )
        return AcademicEventResponse(
            event=AcademicEventOut.model_validate(state["event"]),
            calendarEvent=calendar_event,
        )

    async def delete_event(
        self, user_id: Optional[str], event_id: str, request_id: Optional[str] = None
    ) -> None:
        event = self.repository.get(event_id)
        if not event:
            raise ResourceNotFoundException(f"Academic event {event_id} not found")

        sync = self.sync_service(user_id, request_id)
        check_removed(sync.remove_calendar_event(EventSource.ACADEMICS, event.id), "calendar event")
        self.repository.delete(event.id)
