# familyhub/services/domain_service.py
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from familyhub.core.constants import SyncOperationType, SyncStatus
from familyhub.core.exceptions import SyncException
from familyhub.schemas.sync import SyncResult
from familyhub.services.composite_operation import CompositeOperation, CompositeResult
from familyhub.services.sync_service import SyncService


def check_removed(result: SyncResult, what: str) -> None:
    """Raise when a compensating remove did not go through, so the saga logs it."""
    if not result.ok:
        raise SyncException(f"Failed to remove {what}: {result.error}")


class DomainSyncService:
    """
    Base for feature services whose writes span a domain table and the
    secondary tables owned by the sync engine.
    """

    source_table = "domain"

    def __init__(self, db: Session):
        self.db = db

    def sync_service(self, user_id: Optional[str], request_id: Optional[str]) -> SyncService:
        return SyncService(self.db, request_id=request_id, user_id=user_id)

    async def run(
        self,
        operation: CompositeOperation,
        sync: SyncService,
        operation_type: SyncOperationType = SyncOperationType.CREATE,
        source_id: Optional[Callable[[], Any]] = None,
    ) -> CompositeResult:
        """
        Execute a composite operation; on failure write a rolled_back audit row
        and raise SyncException with the failing step's error.
        """
        result = await operation.execute()
        if result.ok:
            return result

        sync.log_audit(
            operation_type,
            self.source_table,
            source_id() if source_id else None,
            None,
            None,
            SyncStatus.ROLLED_BACK,
            result.error,
            {"failed_step": result.failed_step},
        )
        raise SyncException(
            result.error or "Operation failed",
            details={"failed_step": result.failed_step, "request_id": sync.request_id},
        )
