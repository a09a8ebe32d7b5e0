from sqlalchemy import Boolean, Column, DateTime, String

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class GoogleCalendar(Base):
    """
    An external calendar linked for sync. The sync engine reads its time zone
    when an event targets it without an explicit one.
    """

    __tablename__ = "google_calendars"

    id = Column(String(36), primary_key=True, default=generate_id)
    google_calendar_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    time_zone = Column(String, nullable=True)
    is_primary = Column(Boolean, default=False)
    user_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
