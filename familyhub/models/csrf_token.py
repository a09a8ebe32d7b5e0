from sqlalchemy import BigInteger, Column, DateTime, String

from familyhub.db.base import Base
from familyhub.models._columns import utc_now


class CSRFToken(Base):
    __tablename__ = "csrf_tokens"

    session_id = Column(String, primary_key=True)
    token = Column(String, nullable=False)
    expires = Column(BigInteger, nullable=False, index=True)  # epoch milliseconds
    created_at = Column(DateTime(timezone=True), default=utc_now)
