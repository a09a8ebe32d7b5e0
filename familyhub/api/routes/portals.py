import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.portal_service import PortalService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=schemas.PortalResponse)
async def create_portal(
    portal_in: schemas.PortalCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    portal_service: PortalService = Depends(deps.get_portal_service()),
) -> Any:
    """
    Create a portal login and its password vault entry.
    """
    with log_context(user_id=current_user.id, action="create_portal"):
        logger.info(f"Creating {portal_in.portal_type.value} portal: {portal_in.portal_name}")
        return await portal_service.create_portal(current_user.id, portal_in, request_id)


@router.put("/{portal_id}", response_model=schemas.PortalResponse)
async def update_portal(
    portal_id: str,
    portal_in: schemas.PortalUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    portal_service: PortalService = Depends(deps.get_portal_service()),
) -> Any:
    with log_context(user_id=current_user.id, portal_id=portal_id, action="update_portal"):
        return await portal_service.update_portal(current_user.id, portal_id, portal_in, request_id)


@router.delete("/{portal_id}", response_model=schemas.DeleteResponse)
async def delete_portal(
    portal_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    portal_service: PortalService = Depends(deps.get_portal_service()),
) -> Any:
    with log_context(user_id=current_user.id, portal_id=portal_id, action="delete_portal"):
        await portal_service.delete_portal(current_user.id, portal_id, request_id)
        return {"ok": True, "id": portal_id}
