from typing import Any, List, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.sync_service import SyncService

router = APIRouter()


@router.get("", response_model=List[schemas.SyncAudit])
def read_sync_audit(
    request_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(deps.get_current_active_user),
    sync_service: SyncService = Depends(deps.get_sync_service()),
) -> Any:
    """
    Retrieve sync audit rows, all rows of one request when request_id is given.
    """
    with log_context(user_id=current_user.id, action="read_sync_audit"):
        return sync_service.list_audit(request_id=request_id, skip=skip, limit=limit)
