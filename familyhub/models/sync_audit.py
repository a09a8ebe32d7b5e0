from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from familyhub.db.base import Base
from familyhub.models._columns import utc_now


class SyncAudit(Base):
    """Append-only forensic trail of sync engine steps."""

    __tablename__ = "sync_audit"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(String, index=True, nullable=False)
    operation_type = Column(String, nullable=False)  # create | update | delete | sync
    source_table = Column(String, nullable=False)
    source_id = Column(String, nullable=True)
    target_table = Column(String, nullable=True)
    target_id = Column(String, nullable=True)
    status = Column(String, nullable=False)  # pending | success | failed | rolled_back
    error_message = Column(Text, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    completed_at = Column(DateTime(timezone=True), nullable=True)
