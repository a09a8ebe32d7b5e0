import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.academic_service import AcademicService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=schemas.AcademicEventResponse)
async def create_academic_event(
    event_in: schemas.AcademicEventCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    academic_service: AcademicService = Depends(deps.get_academic_service()),
) -> Any:
    """
    Create a school event; `syncToCalendar` controls the calendar mirror.
    """
    with log_context(user_id=current_user.id, action="create_academic_event"):
        logger.info(f"Creating academic event: {event_in.event_title}")
        return await academic_service.create_event(current_user.id, event_in, request_id)


@router.delete("/{event_id}", response_model=schemas.DeleteResponse)
async def delete_academic_event(
    event_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    academic_service: AcademicService = Depends(deps.get_academic_service()),
) -> Any:
    with log_context(user_id=current_user.id, event_id=event_id, action="delete_academic_event"):
        await academic_service.delete_event(current_user.id, event_id, request_id)
        return {"ok": True, "id": event_id}
