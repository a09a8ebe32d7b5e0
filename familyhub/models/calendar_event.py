from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class CalendarEvent(Base):
    """
    Calendar entry written only by the sync engine.

    start_time / end_time hold canonical ISO text: naive values are local
    wall-clock time and are never converted to UTC. All-day end times are
    exclusive (next day at midnight).
    """

    __tablename__ = "calendar_events"
    __table_args__ = (
        UniqueConstraint("source", "source_reference", name="uq_calendar_events_source_ref"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(String(40), nullable=False)
    end_time = Column(String(40), nullable=False)
    all_day = Column(Boolean, default=False, nullable=False)
    location = Column(String, nullable=True)
    is_virtual = Column(Boolean, default=False)
    meeting_link = Column(String, nullable=True)
    category = Column(String, default="other")

    source = Column(String, nullable=False, index=True)
    source_reference = Column(String, nullable=True)

    attendee_ids = Column(JSON, default=list)  # family member ids
    attendees = Column(JSON, default=list)  # external email addresses
    google_calendar_id = Column(String, nullable=True)
    reminder_minutes = Column(Integer, nullable=True)
    timezone = Column(String, nullable=True)
    metadata_ = Column("metadata", JSON, default=dict)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
