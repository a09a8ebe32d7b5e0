# familyhub/api/deps.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from familyhub.core.config import settings
from familyhub.core.exceptions import AuthenticationException, AuthorizationException
from familyhub.core.security import decode_access_token, is_trusted_service_credential
from familyhub.db.session import get_db
from familyhub.models.user import User
from familyhub.repositories.domain_repositories import UserRepository
from familyhub.services.academic_service import AcademicService
from familyhub.services.calendar_event_service import CalendarEventService
from familyhub.services.document_service import DocumentService
from familyhub.services.health_service import HealthService
from familyhub.services.pet_service import PetService
from familyhub.services.portal_service import PortalService
from familyhub.services.sync_service import SyncService
from familyhub.services.travel_service import TravelService
from familyhub.utils.dependencies import get_service

ACCESS_TOKEN_COOKIE = "access_token"

# Bearer token extraction; the cookie is checked when the header is absent
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_STR}/login/access-token", auto_error=False
)


# Service dependencies - defined as functions that will be called at runtime
# These will only be evaluated after services have been registered
def get_sync_service():
    return get_service(SyncService)


def get_calendar_event_service():
    return get_service(CalendarEventService)


def get_travel_service():
    return get_service(TravelService)


def get_health_service():
    return get_service(HealthService)


def get_pet_service():
    return get_service(PetService)


def get_academic_service():
    return get_service(AcademicService)


def get_portal_service():
    return get_service(PortalService)


def get_document_service():
    return get_service(DocumentService)


def get_request_id(request: Request) -> Optional[str]:
    """Logical request id assigned by RequestIdMiddleware."""
    return getattr(request.state, "request_id", None)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    """
    Resolve the caller.

    Trusted service callers get a non-persisted service principal; everyone
    else must present a valid JWT in the Authorization header or the
    access_token cookie.

    Raises:
        AuthenticationException: If no valid credential is presented
    """
    if is_trusted_service_credential(request.headers.get("authorization")):
        return User(id="service", email="service@localhost", name="service", role="service")

    token = token or request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise AuthenticationException("Not authenticated")

    user_id = decode_access_token(token)
    user = UserRepository(db).get(user_id)
    if not user:
        raise AuthenticationException("User not found")
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.is_active is False:
        raise AuthorizationException("Inactive user")
    return current_user
