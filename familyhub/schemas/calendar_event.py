# familyhub/schemas/calendar_event.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from familyhub.core.constants import EventSource
from familyhub.schemas.sync import CalendarEventData


class CalendarEventInput(CalendarEventData):
    """A calendar event as posted by the UI; the source defaults to the calendar itself."""

    source: str = EventSource.CALENDAR
    sync_to_google: bool = False


class CalendarEventCreate(BaseModel):
    event: CalendarEventInput


class CalendarEventUpdate(BaseModel):
    event: Dict[str, Any]


class CalendarEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    start_time: str
    end_time: str
    all_day: bool
    location: Optional[str] = None
    is_virtual: Optional[bool] = None
    meeting_link: Optional[str] = None
    category: Optional[str] = None
    source: str
    source_reference: Optional[str] = None
    attendee_ids: List[str] = Field(default_factory=list)
    attendees: List[str] = Field(default_factory=list)
    google_calendar_id: Optional[str] = None
    reminder_minutes: Optional[int] = None
    timezone: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("metadata_", "metadata")
    )
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("attendee_ids", "attendees", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_to_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class CalendarEventResponse(BaseModel):
    event: CalendarEvent
