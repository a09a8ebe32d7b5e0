# familyhub/core/security.py
import hmac
from typing import Optional

from jose import JWTError, jwt

from familyhub.core.config import settings
from familyhub.core.exceptions import AuthenticationException

ALGORITHM = settings.JWT_ALGORITHM


def decode_access_token(token: str) -> str:
    """Return the user id carried by a token, or raise AuthenticationException."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthenticationException("Could not validate credentials")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationException("Could not validate credentials")
    return str(subject)


def is_trusted_service_credential(authorization: Optional[str]) -> bool:
    """
    True when the Authorization header carries the pre-shared service secret.

    Trusted callers are a separate security level from user sessions and are
    never evaluated by the session CSRF checks.
    """
    service_key = settings.SERVICE_ROLE_KEY
    if not authorization or not service_key:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {service_key}".encode())
