from typing import Optional

from sqlalchemy.orm import Session

from familyhub.models.csrf_token import CSRFToken
from familyhub.repositories.base_repository import BaseRepository


class CSRFTokenRepository(BaseRepository[CSRFToken]):
    """Durable storage for per-session anti-forgery tokens."""

    def __init__(self, db: Session):
        super().__init__(CSRFToken, db)

    def upsert(self, session_id: str, token: str, expires: int) -> CSRFToken:
        record = self.get(session_id)
        if record:
            record.token = token
            record.expires = expires
            return self.save(record)
        return self.create({"session_id": session_id, "token": token, "expires": expires})

    def delete_expired(self, now_ms: int) -> int:
        count = (
            self.db.query(CSRFToken)
            .filter(CSRFToken.expires < now_ms)
            .delete(synchronize_session=False)
        )
        self._commit()
        return count

    def get_token(self, session_id: str) -> Optional[CSRFToken]:
        return self.get(session_id)
