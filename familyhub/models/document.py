from sqlalchemy import JSON, Column, DateTime, Integer, String

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    file_url = Column(String, unique=True, nullable=False, index=True)
    file_size = Column(Integer, nullable=True)
    file_type = Column(String, nullable=True)
    category = Column(String, default="other")
    source = Column(String, nullable=True)
    source_reference = Column(String, nullable=True)
    assigned_to = Column(JSON, default=list)
    metadata_ = Column("metadata", JSON, default=dict)

    uploaded_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
