from typing import Optional

from sqlalchemy.orm import Session

from familyhub.models.password import PasswordEntry
from familyhub.repositories.base_repository import BaseRepository


class PasswordRepository(BaseRepository[PasswordEntry]):
    """Repository for password entries."""

    def __init__(self, db: Session):
        super().__init__(PasswordEntry, db)

    def get_by_source(self, source: str, source_reference: str) -> Optional[PasswordEntry]:
        return self.get_by(source=source, source_reference=source_reference)

    def delete_by_source(self, source: str, source_reference: str) -> int:
        return self.delete_by(source=source, source_reference=source_reference)
