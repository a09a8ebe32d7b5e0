"""
Storage strategies for per-session CSRF tokens.

``DatabaseTokenStore`` survives restarts; ``MemoryTokenStore`` is process
local and lost on restart. ``FallbackTokenStore`` composes the two so that an
unavailable database degrades to the in-process map instead of failing every
mutating request.
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from familyhub.repositories.csrf_token_repository import CSRFTokenRepository

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CSRFTokenRecord:
    token: str
    expires: int  # epoch milliseconds

    def is_expired(self, at_ms: Optional[int] = None) -> bool:
        return (now_ms() if at_ms is None else at_ms) > self.expires


class TokenStoreError(Exception):
    """The backing store could not be reached."""


class TokenStore(ABC):
    name = "abstract"

    @abstractmethod
    def get(self, session_id: str) -> Optional[CSRFTokenRecord]:
        """Return the stored record, expired or not."""

    @abstractmethod
    def set(self, session_id: str, record: CSRFTokenRecord) -> None:
        """Store a record, replacing any previous one for the session."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        ...

    @abstractmethod
    def cleanup(self) -> int:
        """Drop expired records. Returns how many were removed."""


class MemoryTokenStore(TokenStore):
    name = "memory"

    def __init__(self) -> None:
        self._tokens: Dict[str, CSRFTokenRecord] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[CSRFTokenRecord]:
        with self._lock:
            return self._tokens.get(session_id)

    def set(self, session_id: str, record: CSRFTokenRecord) -> None:
        with self._lock:
            self._tokens[session_id] = record

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._tokens.pop(session_id, None)

    def cleanup(self) -> int:
        current = now_ms()
        with self._lock:
            expired = [sid for sid, rec in self._tokens.items() if rec.is_expired(current)]
            for sid in expired:
                del self._tokens[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._tokens)


class DatabaseTokenStore(TokenStore):
    """Tokens in the ``csrf_tokens`` table, one short-lived session per call."""

    name = "database"

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _run(self, action: Callable[[CSRFTokenRepository], object]):
        db = self.session_factory()
        try:
            return action(CSRFTokenRepository(db))
        except SQLAlchemyError as e:
            raise TokenStoreError(str(e)) from e
        finally:
            db.close()

    def get(self, session_id: str) -> Optional[CSRFTokenRecord]:
        def _get(repo: CSRFTokenRepository) -> Optional[CSRFTokenRecord]:
            row = repo.get_token(session_id)
            return CSRFTokenRecord(token=row.token, expires=row.expires) if row else None

        return self._run(_get)

    def set(self, session_id: str, record: CSRFTokenRecord) -> None:
        self._run(lambda repo: repo.upsert(session_id, record.token, record.expires))

    def delete(self, session_id: str) -> None:
        self._run(lambda repo: repo.delete(session_id))

    def cleanup(self) -> int:
        return self._run(lambda repo: repo.delete_expired(now_ms()))


class FallbackTokenStore(TokenStore):
    """Use ``primary`` and fall back to ``fallback`` whenever it is unreachable."""

    def __init__(self, primary: TokenStore, fallback: TokenStore):
        self.primary = primary
        self.fallback = fallback

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"{self.primary.name}+{self.fallback.name}"

    def _degraded(self, operation: str, error: Exception) -> None:
        logger.warning(
            f"CSRF token store '{self.primary.name}' unavailable during {operation}, "
            f"using '{self.fallback.name}': {error}"
        )

    def get(self, session_id: str) -> Optional[CSRFTokenRecord]:
        try:
            record = self.primary.get(session_id)
        except TokenStoreError as e:
            self._degraded("get", e)
            return self.fallback.get(session_id)
        return record if record is not None else self.fallback.get(session_id)

    def set(self, session_id: str, record: CSRFTokenRecord) -> None:
        try:
            self.primary.set(session_id, record)
        except TokenStoreError as e:
            self._degraded("set", e)
            self.fallback.set(session_id, record)

    def delete(self, session_id: str) -> None:
        self.fallback.delete(session_id)
        try:
            self.primary.delete(session_id)
        except TokenStoreError as e:
            self._degraded("delete", e)

    def cleanup(self) -> int:
        removed = self.fallback.cleanup()
        try:
            removed += self.primary.cleanup()
        except TokenStoreError as e:
            self._degraded("cleanup", e)
        return removed
