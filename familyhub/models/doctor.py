from sqlalchemy import JSON, Column, DateTime, String

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    specialty = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    patient_ids = Column(JSON, default=list)
    # Patient-portal login, mirrored into a Portal row and a PasswordEntry
    portal_url = Column(String, nullable=True)
    portal_username = Column(String, nullable=True)
    portal_password = Column(String, nullable=True)
    portal_id = Column(String(36), nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
