from typing import List, Optional

from sqlalchemy.orm import Session

from familyhub.models.calendar_event import CalendarEvent
from familyhub.repositories.base_repository import BaseRepository


class CalendarEventRepository(BaseRepository[CalendarEvent]):
    """Repository for calendar events."""

    def __init__(self, db: Session):
        super().__init__(CalendarEvent, db)

    def get_by_source(self, source: str, source_reference: str) -> Optional[CalendarEvent]:
        return self.get_by(source=source, source_reference=source_reference)

    def delete_by_source(self, source: str, source_reference: str) -> int:
        return self.delete_by(source=source, source_reference=source_reference)

    def list_in_range(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        source: Optional[str] = None,
        limit: int = 500,
    ) -> List[CalendarEvent]:
        """List events ordered by start; start/end bound by canonical text comparison."""
        query = self.db.query(CalendarEvent)
        if source:
            query = query.filter(CalendarEvent.source == source)
        if start:
            query = query.filter(CalendarEvent.end_time > start)
        if end:
            query = query.filter(CalendarEvent.start_time < end)
        return query.order_by(CalendarEvent.start_time).limit(limit).all()
