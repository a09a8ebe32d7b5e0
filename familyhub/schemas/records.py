# familyhub/schemas/records.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("metadata_", "metadata")
    )

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_to_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class PasswordEntry(_Record):
    """Password entry as returned by the API. The secret itself is never echoed."""

    id: str
    title: str
    service_name: Optional[str] = None
    url: Optional[str] = None
    username: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    source: str
    source_reference: Optional[str] = None
    owner_id: Optional[str] = None
    updated_at: Optional[datetime] = None


class Document(_Record):
    id: str
    title: str
    file_url: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    category: Optional[str] = None
    source: Optional[str] = None
    source_reference: Optional[str] = None
    assigned_to: Optional[List[str]] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentResponse(BaseModel):
    document: Document
    existed: bool
