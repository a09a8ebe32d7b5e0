import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.pet_service import PetService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/appointments", response_model=schemas.PetAppointmentResponse)
async def create_pet_appointment(
    appointment_in: schemas.PetAppointmentCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    pet_service: PetService = Depends(deps.get_pet_service()),
) -> Any:
    """
    Create a pet appointment task and its calendar event.
    """
    with log_context(user_id=current_user.id, action="create_pet_appointment"):
        logger.info(f"Creating pet appointment for pets {appointment_in.pet_ids}")
        return await pet_service.create_appointment(current_user.id, appointment_in, request_id)


@router.delete("/appointments/{appointment_id}", response_model=schemas.DeleteResponse)
async def delete_pet_appointment(
    appointment_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    pet_service: PetService = Depends(deps.get_pet_service()),
) -> Any:
    with log_context(
        user_id=current_user.id, appointment_id=appointment_id, action="delete_pet_appointment"
    ):
        await pet_service.delete_appointment(current_user.id, appointment_id, request_id)
        return {"ok": True, "id": appointment_id}
