import logging
from typing import Any, Dict, List, Optional, Tuple

from familyhub.core.constants import EventSource, PortalType, StepType, SyncOperationType
from familyhub.core.exceptions import ResourceNotFoundException
from familyhub.models.doctor import Doctor
from familyhub.models.portal import Portal
from familyhub.models.task import Task
from familyhub.repositories.domain_repositories import (
    DoctorRepository,
    PortalRepository,
    TaskRepository,
)
from familyhub.schemas.domain import (
    Doctor as DoctorOut,
    DoctorCreate,
    DoctorResponse,
    DoctorUpdate,
    HealthAppointmentCreate,
    HealthAppointmentResponse,
)
from familyhub.services.composite_operation import CompositeOperation
from familyhub.services.domain_service import DomainSyncService, check_removed
from familyhub.services.portal_service import (
    portal_password_source,
    sync_portal_password,
)
from familyhub.services.sync_service import require_ok

# Set up module logger
logger = logging.getLogger(__name__)

TASK_CATEGORY = "medical"
REMINDER_MINUTES = 60
DEFAULT_DURATION_MINUTES = 60

PORTAL_FIELDS = ("portal_name", "portal_url", "username", "password", "patient_ids")
PASSWORD_FIELDS = (
    "title",
    "service_name",
    "url",
    "username",
    "password",
    "category",
    "notes",
    "owner_id",
    "metadata_",
)


def _snapshot(obj: Any, fields: Tuple[str, ...]) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    return {field: getattr(obj, field) for field in fields}


class HealthService(DomainSyncService):
    """Medical appointments (task + calendar event) and doctor records."""

    source_table = "tasks"

    def __init__(self, db):
        super().__init__(db)
        self.task_repository = TaskRepository(db)
        self.doctor_repository = DoctorRepository(db)
        self.portal_repository = PortalRepository(db)

    # Appointments

    async def create_appointment(
        self,
        user_id: Optional[str],
        data: HealthAppointmentCreate,
        request_id: Optional[str] = None,
    ) -> HealthAppointmentResponse:
        sync = self.sync_service(user_id, request_id)
        provider = self.doctor_repository.get(data.provider_id) if data.provider_id else None
        provider_name = provider.name if provider else data.provider_name
        duration = data.duration or DEFAULT_DURATION_MINUTES
        state: Dict[str, Any] = {}

        def create_task() -> Task:
            description = data.description or (
                f"{data.appointment_type or 'Appointment'}"
                + (f" with Dr. {provider_name}" if provider_name else "")
            )
            task = self.task_repository.create(
                {
                    "title": data.title,
                    "description": description,
                    "category": TASK_CATEGORY,
                    "priority": "high",
                    "status": "active",
                    "due_date": data.appointment_date,
                    "assigned_to": data.patient_ids or ([user_id] if user_id else []),
                    "links": [data.virtual_link] if data.is_virtual and data.virtual_link else [],
                    "metadata_": {
                        "provider_id": data.provider_id,
                        "provider_name": provider_name,
                        "appointment_type": data.appointment_type,
                        "duration": duration,
                        "is_virtual": data.is_virtual,
                        "virtual_link": data.virtual_link,
                    },
                    "created_by": user_id,
                }
            )
            state["task"] = task
            return task

        def ensure_event() -> str:
            task = state["task"]
            description = data.appointment_type or "Medical appointment"
            if provider_name:
                description += f"\n\nProvider: Dr. {provider_name}"
            if provider and provider.specialty:
                description += f"\nSpecialty: {provider.specialty}"
            if data.description:
                description += f"\n\n{data.description}"

            metadata: Dict[str, Any] = {
                "provider_id": data.provider_id,
                "provider_name": provider_name,
                "appointment_type": data.appointment_type,
                "patient_ids": data.patient_ids,
                "notify_attendees": data.notify_attendees is not False,
                "additional_attendees": data.additional_attendees_emails,
                "duration_minutes": duration,
            }
            result = sync.ensure_calendar_event(
                {
                    "title": data.title,
                    "description": description,
                    "start_time": data.appointment_date,
                    "end_time": data.end_time,
                    "all_day": False,
                    "location": "Virtual"
                    if data.is_virtual
                    else (data.location or (provider.address if provider else None)),
                    "is_virtual": data.is_virtual,
                    "virtual_link": data.virtual_link,
                    "category": TASK_CATEGORY,
                    "source": EventSource.HEALTH,
                    "source_reference": task.id,
                    "attendee_ids": [*data.patient_ids, *data.attendee_ids],
                    "attendees": data.additional_attendees_emails,
                    "google_calendar_id": data.google_calendar_id,
                    "reminder_minutes": REMINDER_MINUTES,
                    "metadata": metadata,
                }
            )
            state["calendar_event_id"] = require_ok(result, "calendar event")
            return state["calendar_event_id"]

        def remove_event(_: Any) -> None:
            check_removed(
                sync.remove_calendar_event(EventSource.HEALTH, state["task"].id),
                "calendar event",
            )

        def link_event() -> Task:
            task = state["task"]
            metadata = {**(task.metadata_ or {}), "calendar_event_id": state["calendar_event_id"]}
            return self.task_repository.update(task, {"metadata_": metadata})

        operation = CompositeOperation(sync.request_id).add_step(
            StepType.TASK, create_task, lambda task: self.task_repository.delete(task.id)
        )
        if data.sync_to_calendar:
            operation.add_step(StepType.CALENDAR, ensure_event, remove_event)
            operation.add_step(StepType.TASK, link_event, name="link calendar event")

        await self.run(operation, sync, source_id=lambda: getattr(state.get("task"), "id", None))
        return HealthAppointmentResponse(
            appointmentId=state["task"].id,
            calendarEventId=state.get("calendar_event_id"),
        )

    async def delete_appointment(
        self, user_id: Optional[str], appointment_id: str, request_id: Optional[str] = None
    ) -> None:
        task = self.task_repository.get_in_category(appointment_id, TASK_CATEGORY)
        if not task:
            raise ResourceNotFoundException(f"Appointment {appointment_id} not found")

        sync = self.sync_service(user_id, request_id)
        check_removed(sync.remove_calendar_event(EventSource.HEALTH, task.id), "calendar event")
        self.task_repository.delete(task.id)

    # Doctors

    async def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.doctor_repository.get(doctor_id)
        if not doctor:
            raise ResourceNotFoundException(f"Doctor {doctor_id} not found")
        return doctor

    async def list_doctors(self, skip: int = 0, limit: int = 100) -> List[Doctor]:
        return self.doctor_repository.list(skip=skip, limit=limit)

    def _portal_for(self, doctor: Doctor) -> Optional[Portal]:
        if doctor.portal_id:
            portal = self.portal_repository.get(doctor.portal_id)
            if portal:
                return portal
        return self.portal_repository.get_for_doctor(doctor.id)

    def _upsert_portal(self, doctor: Doctor, user_id: Optional[str]) -> Optional[Portal]:
        """Mirror the doctor's portal login into a portal row."""
        has_portal = doctor.portal_url or doctor.portal_username or doctor.portal_password
        portal = self._portal_for(doctor)
        if not has_portal and portal is None:
            return None

        values = {
            "portal_name": f"{doctor.name} Portal",
            "portal_url": doctor.portal_url,
            "username": doctor.portal_username,
            "password": doctor.portal_password,
            "patient_ids": doctor.patient_ids or [],
        }
        if portal:
            return self.portal_repository.update(portal, values)
        return self.portal_repository.create(
            {
                **values,
                "portal_type": PortalType.MEDICAL.value,
                "doctor_id": doctor.id,
                "created_by": user_id,
            }
        )

    async def create_doctor(
        self, user_id: Optional[str], data: DoctorCreate, request_id: Optional[str] = None
    ) -> DoctorResponse:
        sync = self.sync_service(user_id, request_id)
        state: Dict[str, Any] = {}

        def create_doctor() -> Doctor:
            values = data.model_dump(exclude_none=True)
            values["created_by"] = user_id
            state["doctor"] = self.doctor_repository.create(values)
            return state["doctor"]

        def ensure_portal() -> Optional[Portal]:
            state["portal"] = self._upsert_portal(state["doctor"], user_id)
            return state["portal"]

        def delete_portal(portal: Optional[Portal]) -> None:
            if portal is not None:
                self.portal_repository.delete(portal.id)

        def ensure_password() -> Optional[str]:
            portal = state.get("portal")
            state["password_id"] = sync_portal_password(sync, portal) if portal else None
            return state["password_id"]

        def remove_password(password_id: Optional[str]) -> None:
            if password_id:
                check_removed(
                    sync.remove_password_entry(
                        portal_password_source(PortalType.MEDICAL.value), state["portal"].id
                    ),
                    "portal password",
                )

        def link_portal() -> Doctor:
            doctor = state["doctor"]
            portal = state.get("portal")
            if portal is None:
                return doctor
            return self.doctor_repository.update(doctor, {"portal_id": portal.id})

        operation = (
            CompositeOperation(sync.request_id)
            .add_step(StepType.CUSTOM, create_doctor, lambda d: self.doctor_repository.delete(d.id), name="doctor")
            .add_step(StepType.CUSTOM, ensure_portal, delete_portal, name="portal")
            .add_step(StepType.PASSWORD, ensure_password, remove_password)
            .add_step(StepType.CUSTOM, link_portal, name="link portal")
        )
        await self.run(
            operation,
            sync,
            source_id=lambda: getattr(state.get("doctor"), "id", None),
        )
        return self._doctor_response(state["doctor"], state.get("portal"), state.get("password_id"))

    async def update_doctor(
        self,
        user_id: Optional[str],
        doctor_id: str,
        data: DoctorUpdate,
        request_id: Optional[str] = None,
    ) -> DoctorResponse:
        doctor = await self.get_doctor(doctor_id)
        sync = self.sync_service(user_id, request_id)
        changes = data.model_dump(exclude_unset=True)
        snapshot = {field: getattr(doctor, field) for field in changes}
        state: Dict[str, Any] = {}

        # Portal and mirrored password as they were before this update
        portal_before = self._portal_for(doctor)
        portal_snapshot = _snapshot(portal_before, PORTAL_FIELDS)
        password_before = (
            sync.password_repository.get_by_source(
                portal_password_source(portal_before.portal_type), portal_before.id
            )
            if portal_before
            else None
        )
        password_snapshot = _snapshot(password_before, PASSWORD_FIELDS)

        def update_doctor() -> Doctor:
            state["doctor"] = self.doctor_repository.update(doctor, changes)
            return state["doctor"]

        def ensure_portal() -> Optional[Portal]:
            state["portal"] = self._upsert_portal(state["doctor"], user_id)
            return state["portal"]

        def restore_portal(portal: Optional[Portal]) -> None:
            if portal is None:
                return
            if portal_snapshot is None:
                self.portal_repository.delete(portal.id)
            else:
                self.portal_repository.update(portal, portal_snapshot)

        def ensure_password() -> Optional[str]:
            portal = state.get("portal")
            state["password_id"] = sync_portal_password(sync, portal) if portal else None
            return state["password_id"]

        def restore_password(_: Any) -> None:
            portal = state.get("portal")
            if portal is None:
                return
            source = portal_password_source(portal.portal_type)
            if password_snapshot is None:
                check_removed(sync.remove_password_entry(source, portal.id), "portal password")
                return
            entry = sync.password_repository.get_by_source(source, portal.id)
            if entry is None:
                sync.password_repository.create(
                    {**password_snapshot, "source": source, "source_reference": portal.id}
                )
            else:
                sync.password_repository.update(entry, password_snapshot)

        def link_portal() -> Doctor:
            portal = state.get("portal")
            if portal is None or state["doctor"].portal_id == portal.id:
                return state["doctor"]
            return self.doctor_repository.update(state["doctor"], {"portal_id": portal.id})

        operation = (
            CompositeOperation(sync.request_id)
            .add_step(
                StepType.CUSTOM,
                update_doctor,
                lambda d: self.doctor_repository.update(d, snapshot),
                name="doctor",
            )
            .add_step(StepType.CUSTOM, ensure_portal, restore_portal, name="portal")
            .add_step(StepType.PASSWORD, ensure_password, restore_password)
            .add_step(StepType.CUSTOM, link_portal, name="link portal")
        )
        await self.run(operation, sync, SyncOperationType.UPDATE, source_id=lambda: doctor_id)
        return self._doctor_response(state["doctor"], state.get("portal"), state.get("password_id"))

    async def delete_doctor(
        self, user_id: Optional[str], doctor_id: str, request_id: Optional[str] = None
    ) -> None:
        doctor = await self.get_doctor(doctor_id)
        sync = self.sync_service(user_id, request_id)
        portal = self._portal_for(doctor)
        if portal is not None:
            check_removed(
                sync.remove_password_entry(portal_password_source(portal.portal_type), portal.id),
                "portal password",
            )
            self.portal_repository.delete(portal.id)
        self.doctor_repository.delete(doctor.id)

    @staticmethod
    def _doctor_response(
        doctor: Doctor, portal: Optional[Portal], password_id: Optional[str]
    ) -> DoctorResponse:
        return DoctorResponse(
            doctor=DoctorOut.model_validate(doctor),
            portalId=portal.id if portal else None,
            passwordId=password_id,
        )
