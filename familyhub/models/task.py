from sqlalchemy import JSON, Column, DateTime, String, Text

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class Task(Base):
    """Domain record behind health and pet appointments."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, default="other")  # medical | pets | ...
    priority = Column(String, default="medium")
    status = Column(String, default="active")
    due_date = Column(String(40), nullable=True)
    assigned_to = Column(JSON, default=list)
    links = Column(JSON, default=list)
    metadata_ = Column("metadata", JSON, default=dict)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
