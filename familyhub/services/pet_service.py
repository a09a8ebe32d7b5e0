import logging
from typing import Any, Dict, Optional

from familyhub.core.constants import EventSource, StepType
from familyhub.core.exceptions import ResourceNotFoundException
from familyhub.models.task import Task
from familyhub.repositories.domain_repositories import TaskRepository
from familyhub.schemas.domain import PetAppointmentCreate, PetAppointmentResponse
from familyhub.services.composite_operation import CompositeOperation
from familyhub.services.domain_service import DomainSyncService, check_removed
from familyhub.services.sync_service import require_ok

# Set up module logger
logger = logging.getLogger(__name__)

TASK_CATEGORY = "pets"


class PetService(DomainSyncService):
    """Vet appointments, stored as pet tasks mirrored to the calendar."""

    source_table = "tasks"

    def __init__(self, db):
        super().__init__(db)
        self.task_repository = TaskRepository(db)

    async def create_appointment(
        self,
        user_id: Optional[str],
        data: PetAppointmentCreate,
        request_id: Optional[str] = None,
    ) -> PetAppointmentResponse:
        sync = self.sync_service(user_id, request_id)
        state: Dict[str, Any] = {}
        metadata = {
            "pet_ids": data.pet_ids,
            "appointment_type": data.appointment_type,
            "vet_id": data.vet_id,
            "vet_name": data.vet_name,
        }

        def create_task() -> Task:
            state["task"] = self.task_repository.create(
                {
                    "title": data.title,
                    "description": data.description,
                    "category": TASK_CATEGORY,
                    "priority": "medium",
                    "status": "active",
                    "due_date": data.appointment_date,
                    "assigned_to": data.attendee_ids or ([user_id] if user_id else []),
                    "metadata_": metadata,
                    "created_by": user_id,
                }
            )
            return state["task"]

        def ensure_event() -> str:
            description = data.description or (data.appointment_type or "Vet appointment").title()
            if data.vet_name:
                description += f"\nVet: {data.vet_name}"
            result = sync.ensure_calendar_event(
                {
                    "title": data.title,
                    "description": description,
                    "start_time": data.appointment_date,
                    "end_time": data.end_time,
                    "all_day": False,
                    "location": data.location,
                    "category": TASK_CATEGORY,
                    "source": EventSource.PETS,
                    "source_reference": state["task"].id,
                    "attendee_ids": data.attendee_ids,
                    "attendees": data.additional_attendees_emails,
                    "google_calendar_id": data.google_calendar_id,
                    "metadata": {
                        **metadata,
                        "notify_attendees": data.notify_attendees is not False,
                        "additional_attendees": data.additional_attendees_emails,
                    },
                }
            )
            state["calendar_event_id"] = require_ok(result, "calendar event")
            return state["calendar_event_id"]

        def remove_event(_: Any) -> None:
            check_removed(
                sync.remove_calendar_event(EventSource.PETS, state["task"].id),
                "calendar event",
            )

        def link_event() -> Task:
            task = state["task"]
            return self.task_repository.update(
                task,
                {"metadata_": {**(task.metadata_ or {}), "calendar_event_id": state["calendar_event_id"]}},
            )

        operation = CompositeOperation(sync.request_id).add_step(
            StepType.TASK, create_task, lambda task: self.task_repository.delete(task.id)
        )
        if data.sync_to_calendar:
            operation.add_step(StepType.CALENDAR, ensure_event, remove_event)
            operation.add_step(StepType.TASK, link_event, name="link calendar event")

        await self.run(operation, sync, source_id=lambda: getattr(state.get("task"), "id", None))
        return PetAppointmentResponse(
            taskId=state["task"].id, calendarEventId=state.get("calendar_event_id")
        )

    async def delete_appointment(
        self, user_id: Optional[str], task_id: str, request_id: Optional[str] = None
    ) -> None:
        task = self.task_repository.get_in_category(task_id, TASK_CATEGORY)
        if not task:
            raise ResourceNotFoundException(f"Pet appointment {task_id} not found")

        sync = self.sync_service(user_id, request_id)
        check_removed(sync.remove_calendar_event(EventSource.PETS, task.id), "calendar event")
        self.task_repository.delete(task.id)
