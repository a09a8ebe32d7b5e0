"""
Form shapes accepted by the event adapters.

The unified event form posts camelCase keys; snake_case is accepted as well.
Unknown keys are kept (``model_extra``) so that legacy flags such as
``notifyAttendees`` can still be read.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class EventForm(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    title: str = ""
    description: Optional[str] = None
    start_date: Optional[str] = None
    start_time: Optional[str] = None
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    all_day: bool = False
    location: Optional[str] = None
    is_virtual: Optional[bool] = None
    virtual_link: Optional[str] = None
    # External email addresses, either a list or a comma separated string
    attendees: Union[List[str], str, None] = None
    participant_ids: List[str] = Field(default_factory=list)
    google_calendar_id: Optional[str] = None
    reminder_minutes: Optional[int] = None
    category: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    send_invites: bool = False

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_to_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class TravelEventForm(EventForm):
    vehicle_type: Optional[str] = None  # flight | train | car_rental | ferry | ...
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    departure_airport: Optional[str] = None
    arrival_airport: Optional[str] = None
    departure_date: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_date: Optional[str] = None
    arrival_time: Optional[str] = None
    return_date: Optional[str] = None
    return_time: Optional[str] = None
    confirmation_number: Optional[str] = None
    travelers: List[str] = Field(default_factory=list)
    other_travelers: Optional[str] = None
    accommodation_name: Optional[str] = None
    accommodation_type: Optional[str] = None
    trip_id: Optional[str] = None

    @property
    def has_return_leg(self) -> bool:
        return bool(self.return_date and self.return_time)


class HealthEventForm(EventForm):
    provider_id: Optional[str] = None
    provider_name: Optional[str] = None
    appointment_type: Optional[str] = None
    patient_ids: List[str] = Field(default_factory=list)
    parent_attendee_ids: List[str] = Field(default_factory=list)
    duration: Optional[int] = None
    notes: Optional[str] = None


class PetsEventForm(EventForm):
    pet_ids: List[str] = Field(default_factory=list)
    appointment_type: Optional[str] = None
    vet_id: Optional[str] = None
    vet_name: Optional[str] = None
    owner_attendee_ids: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class AcademicsEventForm(EventForm):
    event_type: Optional[str] = None
    student_ids: List[str] = Field(default_factory=list)
    parent_ids: List[str] = Field(default_factory=list)
    other_participants: Optional[str] = None
    school_name: Optional[str] = None
    notes: Optional[str] = None
