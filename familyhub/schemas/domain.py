# familyhub/schemas/domain.py
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from familyhub.core.constants import PortalType
from familyhub.utils.datetimes import parse_event_datetime


def _split_emails(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def _event_time(value: Optional[str]) -> Optional[str]:
    """Event times must parse; None passes through."""
    if value is None:
        return None
    parse_event_datetime(value)
    return value.strip()


# Travel
class TravelDetailCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    type: str = "other"
    departure_time: str
    arrival_time: Optional[str] = None
    departure_timezone: Optional[str] = None
    arrival_timezone: Optional[str] = None
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    departure_airport: Optional[str] = None
    arrival_airport: Optional[str] = None
    confirmation_number: Optional[str] = None
    attendee_ids: List[str] = Field(default_factory=list)
    travelers: List[str] = Field(default_factory=list)
    attendees: List[str] = Field(default_factory=list)
    additional_attendees: List[str] = Field(default_factory=list)
    accommodation_name: Optional[str] = None
    accommodation_type: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    trip_id: Optional[str] = None
    google_sync_enabled: bool = False
    google_calendar_id: Optional[str] = None
    send_invites: bool = False
    notify_attendees: Optional[bool] = None

    @field_validator(
        "attendee_ids", "travelers", "attendees", "additional_attendees", mode="before"
    )
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return _split_emails(v)

    @field_validator("departure_time", "arrival_time")
    @classmethod
    def _times(cls, v: Optional[str]) -> Optional[str]:
        return _event_time(v)


class TravelDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    trip_id: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    travel_date: Optional[str] = None
    departure_time: str
    arrival_time: Optional[str] = None
    departure_timezone: Optional[str] = None
    arrival_timezone: Optional[str] = None
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    departure_airport: Optional[str] = None
    arrival_airport: Optional[str] = None
    confirmation_number: Optional[str] = None
    traveler_ids: Optional[List[str]] = None
    additional_attendees: Optional[List[str]] = None
    calendar_event_id: Optional[str] = None
    created_at: Optional[datetime] = None


class TravelDetailResponse(BaseModel):
    detail: TravelDetail
    calendarEventId: Optional[str] = None


# Health
class HealthAppointmentCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    description: Optional[str] = None
    provider_id: Optional[str] = None
    provider_name: Optional[str] = None
    appointment_type: Optional[str] = None
    patient_ids: List[str] = Field(default_factory=list)
    attendee_ids: List[str] = Field(default_factory=list)
    appointment_date: str
    end_time: Optional[str] = None
    duration: Optional[int] = 60
    location: Optional[str] = None
    is_virtual: bool = False
    virtual_link: Optional[str] = None
    sync_to_calendar: bool = True
    google_calendar_id: Optional[str] = None
    send_invites: bool = False
    additional_attendees_emails: List[str] = Field(default_factory=list)
    notify_attendees: Optional[bool] = None

    @field_validator(
        "patient_ids", "attendee_ids", "additional_attendees_emails", mode="before"
    )
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return _split_emails(v)

    @field_validator("appointment_date", "end_time")
    @classmethod
    def _times(cls, v: Optional[str]) -> Optional[str]:
        return _event_time(v)


class HealthAppointmentResponse(BaseModel):
    appointmentId: str
    calendarEventId: Optional[str] = None


# Pets
class PetAppointmentCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    description: Optional[str] = None
    pet_ids: List[str] = Field(default_factory=list)
    appointment_type: Optional[str] = "checkup"
    vet_id: Optional[str] = None
    vet_name: Optional[str] = None
    appointment_date: str
    end_time: Optional[str] = None
    location: Optional[str] = None
    attendee_ids: List[str] = Field(default_factory=list)
    sync_to_calendar: bool = True
    google_calendar_id: Optional[str] = None
    send_invites: bool = False
    additional_attendees_emails: List[str] = Field(default_factory=list)
    notify_attendees: Optional[bool] = None

    @field_validator("pet_ids", "attendee_ids", "additional_attendees_emails", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return _split_emails(v)

    @field_validator("appointment_date", "end_time")
    @classmethod
    def _times(cls, v: Optional[str]) -> Optional[str]:
        return _event_time(v)


class PetAppointmentResponse(BaseModel):
    taskId: str
    calendarEventId: Optional[str] = None


# Academics
class AcademicEventCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_title: str
    notes: Optional[str] = None
    event_type: str = "Meeting"
    event_date: str
    end_time: Optional[str] = None
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)  # student ids
    parent_ids: List[str] = Field(default_factory=list)
    additional_attendees: List[str] = Field(default_factory=list)
    sync_to_calendar: bool = Field(True, alias="syncToCalendar")
    google_calendar_id: Optional[str] = None
    google_sync_enabled: bool = False
    notify_attendees: Optional[bool] = None

    @field_validator("attendees", "parent_ids", "additional_attendees", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return _split_emails(v)

    @field_validator("event_date", "end_time")
    @classmethod
    def _times(cls, v: Optional[str]) -> Optional[str]:
        return _event_time(v)


class AcademicEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_title: str
    event_type: Optional[str] = None
    event_date: str
    end_time: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    student_ids: Optional[List[str]] = None
    parent_ids: Optional[List[str]] = None
    additional_attendees: Optional[List[str]] = None
    calendar_event_id: Optional[str] = None


class AcademicEventResponse(BaseModel):
    event: AcademicEvent
    calendarEvent: Optional[Any] = None


# Portals and doctors
class PortalBase(BaseModel):
    portal_name: Optional[str] = None
    portal_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    patient_ids: Optional[List[str]] = None


class PortalCreate(PortalBase):
    portal_type: PortalType
    portal_name: str


class PortalUpdate(PortalBase):
    pass


class Portal(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    portal_type: str
    portal_name: str
    portal_url: Optional[str] = None
    username: Optional[str] = None
    patient_ids: Optional[List[str]] = None
    doctor_id: Optional[str] = None


class PortalResponse(BaseModel):
    portal: Portal
    passwordId: Optional[str] = None


class DoctorBase(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    patient_ids: Optional[List[str]] = None
    portal_url: Optional[str] = None
    portal_username: Optional[str] = None
    portal_password: Optional[str] = None


class DoctorCreate(DoctorBase):
    name: str


class DoctorUpdate(DoctorBase):
    pass


class Doctor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    specialty: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    patient_ids: Optional[List[str]] = None
    portal_url: Optional[str] = None
    portal_username: Optional[str] = None
    portal_id: Optional[str] = None


class DoctorResponse(BaseModel):
    doctor: Doctor
    portalId: Optional[str] = None
    passwordId: Optional[str] = None


class DeleteResponse(BaseModel):
    ok: bool = True
    id: Optional[str] = None
