from typing import Optional

from sqlalchemy.orm import Session

from familyhub.models.google_calendar import GoogleCalendar
from familyhub.repositories.base_repository import BaseRepository


class GoogleCalendarRepository(BaseRepository[GoogleCalendar]):
    """Repository for linked Google calendars."""

    def __init__(self, db: Session):
        super().__init__(GoogleCalendar, db)

    def get_by_google_calendar_id(self, google_calendar_id: str) -> Optional[GoogleCalendar]:
        return self.get_by(google_calendar_id=google_calendar_id)

    def get_time_zone(self, google_calendar_id: str) -> Optional[str]:
        calendar = self.get_by_google_calendar_id(google_calendar_id)
        return calendar.time_zone if calendar else None
