from typing import Optional

from sqlalchemy.orm import Session

from familyhub.models.document import Document
from familyhub.repositories.base_repository import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for documents. file_url is the natural key."""

    def __init__(self, db: Session):
        super().__init__(Document, db)

    def get_by_url(self, file_url: str) -> Optional[Document]:
        return self.get_by(file_url=file_url)
