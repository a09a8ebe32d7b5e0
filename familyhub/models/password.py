from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text, UniqueConstraint

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class PasswordEntry(Base):
    # Stored as plaintext at rest.
    __tablename__ = "passwords"
    __table_args__ = (
        UniqueConstraint("source", "source_reference", name="uq_passwords_source_ref"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    service_name = Column(String, nullable=True)
    url = Column(String, nullable=True)
    username = Column(String, nullable=True)
    password = Column(String, nullable=False, default="")
    category = Column(String, default="other")
    notes = Column(Text, nullable=True)
    is_favorite = Column(Boolean, default=False)

    source = Column(String, nullable=False, index=True)
    source_reference = Column(String, nullable=True)
    owner_id = Column(String(36), nullable=True)
    metadata_ = Column("metadata", JSON, default=dict)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
