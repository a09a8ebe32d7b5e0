from sqlalchemy import JSON, Column, DateTime, String

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class Portal(Base):
    __tablename__ = "portals"

    id = Column(String(36), primary_key=True, default=generate_id)
    portal_type = Column(String, nullable=False)  # medical | pet | academic | travel
    portal_name = Column(String, nullable=False)
    portal_url = Column(String, nullable=True)
    username = Column(String, nullable=True)
    password = Column(String, nullable=True)
    patient_ids = Column(JSON, default=list)
    doctor_id = Column(String(36), nullable=True, index=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
