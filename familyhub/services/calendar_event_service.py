import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from familyhub.core.exceptions import (
    ResourceNotFoundException,
    SyncException,
    ValidationException,
)
from familyhub.models.calendar_event import CalendarEvent
from familyhub.repositories.calendar_event_repository import CalendarEventRepository
from familyhub.schemas.calendar_event import CalendarEvent as CalendarEventOut
from familyhub.schemas.calendar_event import CalendarEventInput
from familyhub.schemas.sync import CalendarEventData
from familyhub.services.sync_service import SyncService, validation_message

# Set up module logger
logger = logging.getLogger(__name__)

_IDENTITY_FIELDS = ("source", "source_reference")


class CalendarEventService:
    """Calendar events posted directly by the calendar UI or by other services."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = CalendarEventRepository(db)

    def _sync(self, user_id: Optional[str], request_id: Optional[str]) -> SyncService:
        return SyncService(self.db, request_id=request_id, user_id=user_id)

    async def create_event(
        self, user_id: Optional[str], data: CalendarEventInput, request_id: Optional[str] = None
    ) -> CalendarEvent:
        if not data.source_reference:
            data = data.model_copy(update={"source_reference": str(uuid.uuid4())})

        result = self._sync(user_id, request_id).ensure_calendar_event(data)
        if not result.ok:
            raise SyncException(result.error or "Failed to save calendar event")
        return self.repository.get(result.id)

    async def get_event(self, event_id: str) -> CalendarEvent:
        event = self.repository.get(event_id)
        if not event:
            raise ResourceNotFoundException(f"Calendar event {event_id} not found")
        return event

    async def list_events(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        source: Optional[str] = None,
        limit: int = 500,
    ) -> List[CalendarEvent]:
        return self.repository.list_in_range(start=start, end=end, source=source, limit=limit)

    async def update_event(
        self,
        user_id: Optional[str],
        event_id: str,
        changes: Dict[str, Any],
        request_id: Optional[str] = None,
    ) -> CalendarEvent:
        """
        Apply a partial update through the sync engine. The identity pair is
        fixed; metadata keys are merged into the stored bag.
        """
        existing = await self.get_event(event_id)
        if not existing.source_reference:
            self.repository.update(existing, {"source_reference": existing.id})

        merged = CalendarEventOut.model_validate(existing).model_dump()
        for key, value in changes.items():
            if key in _IDENTITY_FIELDS:
                continue
            if key == "metadata" and isinstance(value, dict):
                merged["metadata"] = {**merged["metadata"], **value}
            elif key == "virtual_link":
                merged["meeting_link"] = value
            else:
                merged[key] = value

        try:
            payload = CalendarEventData.model_validate(merged)
        except ValidationError as e:
            raise ValidationException(validation_message(e))

        result = self._sync(user_id, request_id).ensure_calendar_event(payload)
        if not result.ok:
            raise SyncException(result.error or "Failed to update calendar event")
        self.db.refresh(existing)
        return existing

    async def delete_event(
        self, user_id: Optional[str], event_id: str, request_id: Optional[str] = None
    ) -> None:
        existing = await self.get_event(event_id)
        if not existing.source_reference:
            self.repository.delete(existing.id)
            return

        result = self._sync(user_id, request_id).remove_calendar_event(
            existing.source, existing.source_reference
        )
        if not result.ok:
            raise SyncException(result.error or "Failed to delete calendar event")
