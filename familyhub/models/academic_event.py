from sqlalchemy import JSON, Column, DateTime, String, Text

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class AcademicEvent(Base):
    __tablename__ = "academic_events"

    id = Column(String(36), primary_key=True, default=generate_id)
    event_title = Column(String, nullable=False)
    event_type = Column(String, default="Meeting")
    event_date = Column(String(40), nullable=False)
    end_time = Column(String(40), nullable=True)
    location = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    student_ids = Column(JSON, default=list)
    parent_ids = Column(JSON, default=list)
    additional_attendees = Column(JSON, default=list)
    calendar_event_id = Column(String(36), nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
