import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends

from familyhub import schemas
from familyhub.api import deps
from familyhub.core.logging import log_context
from familyhub.models.user import User
from familyhub.services.document_service import DocumentService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=schemas.DocumentResponse)
async def save_document(
    document_in: schemas.DocumentData,
    current_user: User = Depends(deps.get_current_active_user),
    request_id: Optional[str] = Depends(deps.get_request_id),
    document_service: DocumentService = Depends(deps.get_document_service()),
) -> Any:
    """
    Record an uploaded file. Saving the same file_url again updates the record.
    """
    with log_context(user_id=current_user.id, action="save_document"):
        logger.info(f"Saving document: {document_in.title}")
        return await document_service.save_document(current_user.id, document_in, request_id)


@router.get("", response_model=List[schemas.Document])
async def read_documents(
    category: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(deps.get_current_active_user),
    document_service: DocumentService = Depends(deps.get_document_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="list_documents"):
        return await document_service.list_documents(category=category, skip=skip, limit=limit)


@router.delete("/{document_id}", response_model=schemas.DeleteResponse)
async def delete_document(
    document_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    document_service: DocumentService = Depends(deps.get_document_service()),
) -> Any:
    with log_context(user_id=current_user.id, document_id=document_id, action="delete_document"):
        await document_service.delete_document(document_id)
        return {"ok": True, "id": document_id}
