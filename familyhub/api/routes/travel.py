import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.travel_service import TravelService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=schemas.TravelDetailResponse)
async def create_travel_detail(
    detail_in: schemas.TravelDetailCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    travel_service: TravelService = Depends(deps.get_travel_service()),
) -> Any:
    """
    Create one trip leg and its calendar event.
    """
    with log_context(user_id=current_user.id, action="create_travel_detail"):
        logger.info(f"Creating {detail_in.type} leg departing {detail_in.departure_time}")
        return await travel_service.create_detail(current_user.id, detail_in, request_id)


@router.get("", response_model=List[schemas.TravelDetail])
async def read_travel_details(
    trip_id: Optional[str] = None,
    current_user: User = Depends(deps.get_current_active_user),
    travel_service: TravelService = Depends(deps.get_travel_service()),
) -> Any:
    """
    Retrieve trip legs, optionally the legs of one trip.
    """
    with log_context(user_id=current_user.id, action="list_travel_details"):
        return await travel_service.list_details(trip_id)


@router.delete("/{detail_id}", response_model=schemas.DeleteResponse)
async def delete_travel_detail(
    detail_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    travel_service: TravelService = Depends(deps.get_travel_service()),
) -> Any:
    with log_context(user_id=current_user.id, detail_id=detail_id, action="delete_travel_detail"):
        await travel_service.delete_detail(current_user.id, detail_id, request_id)
        return {"ok": True, "id": detail_id}
