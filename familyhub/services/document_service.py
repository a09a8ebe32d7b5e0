import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from familyhub.core.exceptions import ResourceNotFoundException, SyncException
from familyhub.models.document import Document
from familyhub.repositories.document_repository import DocumentRepository
from familyhub.schemas.records import Document as DocumentOut
from familyhub.schemas.records import DocumentResponse
from familyhub.schemas.sync import DocumentData
from familyhub.services.sync_service import SyncService

# Set up module logger
logger = logging.getLogger(__name__)


class DocumentService:
    """Document metadata, upserted by storage URL."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = DocumentRepository(db)

    async def save_document(
        self, user_id: Optional[str], data: DocumentData, request_id: Optional[str] = None
    ) -> DocumentResponse:
        sync = SyncService(self.db, request_id=request_id, user_id=user_id)
        result = sync.ensure_document(data)
        if not result.ok:
            raise SyncException(result.error or "Failed to save document")

        document = self.repository.get(result.id)
        return DocumentResponse(
            document=DocumentOut.model_validate(document), existed=bool(result.existed)
        )

    async def list_documents(
        self, category: Optional[str] = None, skip: int = 0, limit: int = 100
    ) -> List[Document]:
        if category:
            return self.repository.list(skip=skip, limit=limit, category=category)
        return self.repository.list(skip=skip, limit=limit)

    async def delete_document(self, document_id: str) -> None:
        if not self.repository.delete(document_id):
            raise ResourceNotFoundException(f"Document {document_id} not found")
