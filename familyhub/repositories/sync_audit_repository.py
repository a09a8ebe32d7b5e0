from typing import List

from sqlalchemy.orm import Session

from familyhub.models.sync_audit import SyncAudit
from familyhub.repositories.base_repository import BaseRepository


class SyncAuditRepository(BaseRepository[SyncAudit]):
    """Append-only access to the sync audit trail."""

    def __init__(self, db: Session):
        super().__init__(SyncAudit, db)

    def list_for_request(self, request_id: str) -> List[SyncAudit]:
        return (
            self.db.query(SyncAudit)
            .filter(SyncAudit.request_id == request_id)
            .order_by(SyncAudit.id)
            .all()
        )

    def list_recent(self, skip: int = 0, limit: int = 100) -> List[SyncAudit]:
        return (
            self.db.query(SyncAudit)
            .order_by(SyncAudit.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
