import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.health_service import HealthService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


# Appointments


@router.post("/appointments", response_model=schemas.HealthAppointmentResponse)
async def create_appointment(
    appointment_in: schemas.HealthAppointmentCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    health_service: HealthService = Depends(deps.get_health_service()),
) -> Any:
    """
    Create a medical appointment task and, unless disabled, its calendar event.
    """
    with log_context(user_id=current_user.id, action="create_health_appointment"):
        logger.info(f"Creating health appointment: {appointment_in.title}")
        return await health_service.create_appointment(current_user.id, appointment_in, request_id)


@router.delete("/appointments/{appointment_id}", response_model=schemas.DeleteResponse)
async def delete_appointment(
    appointment_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    health_service: HealthService = Depends(deps.get_health_service()),
) -> Any:
    with log_context(
        user_id=current_user.id, appointment_id=appointment_id, action="delete_health_appointment"
    ):
        await health_service.delete_appointment(current_user.id, appointment_id, request_id)
        return {"ok": True, "id": appointment_id}


# Doctors


@router.get("/doctors", response_model=List[schemas.Doctor])
async def read_doctors(
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(deps.get_current_active_user),
    health_service: HealthService = Depends(deps.get_health_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="list_doctors"):
        return await health_service.list_doctors(skip=skip, limit=limit)


@router.post("/doctors", response_model=schemas.DoctorResponse)
async def create_doctor(
    doctor_in: schemas.DoctorCreate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    health_service: HealthService = Depends(deps.get_health_service()),
) -> Any:
    """
    Create a doctor. Portal credentials, when given, become a medical portal
    and a password vault entry.
    """
    with log_context(user_id=current_user.id, action="create_doctor"):
        return await health_service.create_doctor(current_user.id, doctor_in, request_id)


@router.put("/doctors/{doctor_id}", response_model=schemas.DoctorResponse)
async def update_doctor(
    doctor_id: str,
    doctor_in: schemas.DoctorUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    health_service: HealthService = Depends(deps.get_health_service()),
) -> Any:
    with log_context(user_id=current_user.id, doctor_id=doctor_id, action="update_doctor"):
        return await health_service.update_doctor(current_user.id, doctor_id, doctor_in, request_id)


@router.delete("/doctors/{doctor_id}", response_model=schemas.DeleteResponse)
async def delete_doctor(
    doctor_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    health_service: HealthService = Depends(deps.get_health_service()),
) -> Any:
    with log_context(user_id=current_user.id, doctor_id=doctor_id, action="delete_doctor"):
        await health_service.delete_doctor(current_user.id, doctor_id, request_id)
        return {"ok": True, "id": doctor_id}
