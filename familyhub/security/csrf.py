"""
Double-submit-cookie CSRF protection.

A token is issued per session (``csrf-session`` cookie) and stored server
side. Mutating requests must echo it in the ``x-csrf-token`` header, or in the
``csrf-token`` cookie. When the store has no record for the session, a
cookie-only match is accepted so that a store outage does not lock every
user out.
"""
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Mapping, Optional

from familyhub.core.config import Settings, settings
from familyhub.core.constants import SAFE_METHODS
from familyhub.core.security import is_trusted_service_credential
from familyhub.db.base import SessionLocal
from familyhub.security.token_store import (
    CSRFTokenRecord,
    DatabaseTokenStore,
    FallbackTokenStore,
    MemoryTokenStore,
    TokenStore,
    now_ms,
)

logger = logging.getLogger(__name__)

NO_SESSION_ERROR = "No session found"
INVALID_TOKEN_ERROR = "Invalid or missing CSRF token"


def mask_token(token: Optional[str]) -> str:
    """Loggable form of a token: first and last four characters only."""
    if not token:
        return "null"
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}…{token[-4:]}"


def _tokens_match(expected: str, provided: str) -> bool:
    return hmac.compare_digest(expected.encode(), provided.encode())


def generate_token(nbytes: Optional[int] = None) -> str:
    return secrets.token_hex(nbytes or settings.CSRF_TOKEN_BYTES)


@dataclass
class CSRFCheck:
    valid: bool
    error: Optional[str] = None
    trusted: bool = False


class CSRFProtector:
    """Issues and validates per-session tokens against a TokenStore."""

    def __init__(
        self,
        store: TokenStore,
        ttl_seconds: Optional[int] = None,
        token_bytes: Optional[int] = None,
        header_name: Optional[str] = None,
        cookie_name: Optional[str] = None,
    ):
        self.store = store
        self.ttl_ms = (ttl_seconds or settings.CSRF_TOKEN_TTL_SECONDS) * 1000
        self.token_bytes = token_bytes or settings.CSRF_TOKEN_BYTES
        self.header_name = (header_name or settings.CSRF_HEADER_NAME).lower()
        self.cookie_name = cookie_name or settings.CSRF_COOKIE_NAME

    def create_token(self, session_id: str) -> str:
        token = generate_token(self.token_bytes)
        expires = now_ms() + self.ttl_ms
        self.store.set(session_id, CSRFTokenRecord(token=token, expires=expires))
        self._prune()
        logger.info(
            f"CSRF token issued for session {mask_token(session_id)} "
            f"(store={self.store.name}, expires={expires})"
        )
        return token

    def get_or_create_token(self, session_id: str) -> str:
        """Reuse the session's live token, issuing a new one when absent or expired."""
        record = self.store.get(session_id)
        if record and not record.is_expired():
            return record.token
        return self.create_token(session_id)

    def invalidate(self, session_id: str) -> None:
        self.store.delete(session_id)

    def extract_token(
        self, headers: Mapping[str, str], cookies: Mapping[str, str]
    ) -> Optional[str]:
        return headers.get(self.header_name) or cookies.get(self.cookie_name) or None

    def validate(
        self,
        method: str,
        session_id: str,
        headers: Mapping[str, str],
        cookies: Mapping[str, str],
    ) -> bool:
        if method.upper() in SAFE_METHODS:
            return True

        provided = self.extract_token(headers, cookies)
        if not provided:
            logger.warning("CSRF: no token provided in request")
            return False

        record = self.store.get(session_id)
        cookie_token = cookies.get(self.cookie_name)
        logger.debug(
            f"CSRF: validating session={mask_token(session_id)} provided={mask_token(provided)} "
            f"cookie={mask_token(cookie_token)} store_hit={record is not None} "
            f"store={self.store.name}"
        )

        if record is None:
            if cookie_token and _tokens_match(cookie_token, provided):
                logger.warning("CSRF: no stored token, falling back to cookie validation")
                return True
            logger.warning(f"CSRF: no token found for session {mask_token(session_id)}")
            return False

        if record.is_expired():
            logger.warning(f"CSRF: token expired for session {mask_token(session_id)}")
            self.store.delete(session_id)
            return False

        if not _tokens_match(record.token, provided):
            logger.warning(
                f"CSRF: token mismatch provided={mask_token(provided)} "
                f"stored={mask_token(record.token)}"
            )
            return False
        return True

    def check_request(
        self,
        method: str,
        headers: Mapping[str, str],
        cookies: Mapping[str, str],
        session_id: Optional[str] = None,
    ) -> CSRFCheck:
        """Full gate for one request: safe methods, trusted callers, then session tokens."""
        if method.upper() in SAFE_METHODS:
            return CSRFCheck(valid=True)

        # Trusted service callers are a separate security level
        if is_trusted_service_credential(headers.get("authorization")):
            return CSRFCheck(valid=True, trusted=True)

        sid = session_id or cookies.get(settings.CSRF_SESSION_COOKIE_NAME)
        if not sid:
            return CSRFCheck(valid=False, error=NO_SESSION_ERROR)

        if not self.validate(method, sid, headers, cookies):
            return CSRFCheck(valid=False, error=INVALID_TOKEN_ERROR)
        return CSRFCheck(valid=True)

    def _prune(self) -> None:
        try:
            removed = self.store.cleanup()
        except Exception as e:
            # Pruning is opportunistic; the token has already been stored
            logger.warning(f"CSRF: expired token cleanup failed: {e}")
            return
        if removed:
            logger.debug(f"CSRF: pruned {removed} expired tokens")


def build_token_store(config: Settings = settings) -> TokenStore:
    if config.CSRF_TOKEN_STORE == "memory":
        return MemoryTokenStore()
    return FallbackTokenStore(DatabaseTokenStore(SessionLocal), MemoryTokenStore())


_protector: Optional[CSRFProtector] = None


def get_csrf_protector() -> CSRFProtector:
    """Process-wide protector, built on first use."""
    global _protector
    if _protector is None:
        store = build_token_store()
        logger.info(f"CSRF protection using '{store.name}' token store")
        _protector = CSRFProtector(store)
    return _protector


def set_csrf_protector(protector: Optional[CSRFProtector]) -> None:
    """Replace (or with None, reset) the process-wide protector."""
    global _protector
    _protector = protector
