import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.calendar_event_service import CalendarEventService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=schemas.CalendarEventResponse)
async def create_calendar_event(
    body: schemas.CalendarEventCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    service: CalendarEventService = Depends(deps.get_calendar_event_service()),
) -> Any:
    """
    Create a calendar event. An event whose (source, source_reference) already
    exists is updated in place.
    """
    with log_context(user_id=current_user.id, action="create_calendar_event"):
        logger.info(f"Saving calendar event: {body.event.title}")
        event = await service.create_event(current_user.id, body.event, request_id)
        return {"event": event}


@router.get("", response_model=Dict[str, List[schemas.CalendarEvent]])
async def list_calendar_events(
    start: Optional[str] = None,
    end: Optional[str] = None,
    source: Optional[str] = None,
    limit: int = 500,
    current_user: User = Depends(deps.get_current_active_user),
    service: CalendarEventService = Depends(deps.get_calendar_event_service()),
) -> Any:
    """
    List events overlapping [start, end), optionally for one source feature.
    """
    with log_context(user_id=current_user.id, action="list_calendar_events"):
        events = await service.list_events(start=start, end=end, source=source, limit=limit)
        return {"events": events}


@router.get("/{event_id}", response_model=schemas.CalendarEventResponse)
async def read_calendar_event(
    event_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    service: CalendarEventService = Depends(deps.get_calendar_event_service()),
) -> Any:
    with log_context(user_id=current_user.id, event_id=event_id, action="get_calendar_event"):
        return {"event": await service.get_event(event_id)}


@router.put("/{event_id}", response_model=schemas.CalendarEventResponse)
async def update_calendar_event(
    event_id: str,
    body: schemas.CalendarEventUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    service: CalendarEventService = Depends(deps.get_calendar_event_service()),
) -> Any:
    """
    Partially update an event. Metadata keys are merged into the stored ones.
    """
    with log_context(user_id=current_user.id, event_id=event_id, action="update_calendar_event"):
        event = await service.update_event(current_user.id, event_id, body.event, request_id)
        return {"event": event}


@router.delete("/{event_id}", response_model=schemas.DeleteResponse)
async def delete_calendar_event(
    event_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    service: CalendarEventService = Depends(deps.get_calendar_event_service()),
) -> Any:
    with log_context(user_id=current_user.id, event_id=event_id, action="delete_calendar_event"):
        await service.delete_event(current_user.id, event_id, request_id)
        return {"ok": True, "id": event_id}
