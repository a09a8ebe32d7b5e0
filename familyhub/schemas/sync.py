# familyhub/schemas/sync.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from familyhub.schemas._metadata import validate_event_metadata
from familyhub.utils.datetimes import parse_event_datetime


class SyncResult(BaseModel):
    """Outcome of one ensure/remove call against a secondary table."""

    ok: bool
    id: Optional[str] = None
    existed: Optional[bool] = None
    error: Optional[str] = None


class CalendarEventData(BaseModel):
    """Payload accepted by the sync engine for calendar upserts."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: Optional[str] = None
    start_time: str
    end_time: Optional[str] = None
    all_day: bool = False
    location: Optional[str] = None
    is_virtual: Optional[bool] = None
    virtual_link: Optional[str] = None
    meeting_link: Optional[str] = None
    category: str = "other"
    source: str
    source_reference: Optional[str] = None
    attendee_ids: List[str] = Field(default_factory=list)
    attendees: List[str] = Field(default_factory=list)
    google_calendar_id: Optional[str] = None
    reminder_minutes: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timezone: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def _parseable_start(cls, v: str) -> str:
        parse_event_datetime(v)
        return v.strip()

    @field_validator("end_time")
    @classmethod
    def _parseable_end(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        parse_event_datetime(v)
        return v.strip()

    @field_validator("attendee_ids", "attendees", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("metadata", mode="before")
    @classmethod
    def _check_metadata(cls, v: Any) -> Dict[str, Any]:
        return validate_event_metadata(v)


class PasswordData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(validation_alias=AliasChoices("name", "title"))
    website: Optional[str] = Field(None, validation_alias=AliasChoices("website", "url"))
    username: Optional[str] = None
    password: str = ""
    category: str = "other"
    source: str
    source_reference: str
    notes: Optional[str] = None
    owner_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_to_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class DocumentData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    file_url: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    category: str = "other"
    source: Optional[str] = None
    source_reference: Optional[str] = None
    assigned_to: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_to_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class SyncAudit(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    request_id: str
    operation_type: str
    source_table: str
    source_id: Optional[str] = None
    target_table: Optional[str] = None
    target_id: Optional[str] = None
    status: str
    error_message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("metadata_", "metadata")
    )
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
