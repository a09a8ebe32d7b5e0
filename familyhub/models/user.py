from sqlalchemy import Boolean, Column, DateTime, String

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, default="member")  # member | admin | service
    is_active = Column(Boolean(), default=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
