import logging
import secrets

from fastapi import APIRouter, Request, Response

from familyhub.core.config import settings
from familyhub.core.logging import log_context
from familyhub.schemas.csrf import CSRFTokenResponse
from familyhub.schemas.domain import DeleteResponse
from familyhub.security.csrf import get_csrf_protector

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


def _set_cookie(response: Response, name: str, value: str, httponly: bool) -> None:
    response.set_cookie(
        name,
        value,
        max_age=settings.CSRF_TOKEN_TTL_SECONDS,
        httponly=httponly,
        samesite="strict",
        secure=settings.ENVIRONMENT == "production",
        path="/",
    )


@router.get("/csrf", response_model=CSRFTokenResponse)
def get_csrf_token(request: Request, response: Response) -> CSRFTokenResponse:
    """Issue (or reuse) the CSRF token of the caller's session and set both cookies."""
    session_id = request.cookies.get(settings.CSRF_SESSION_COOKIE_NAME) or secrets.token_urlsafe(32)
    with log_context(action="issue_csrf_token"):
        token = get_csrf_protector().get_or_create_token(session_id)

    _set_cookie(response, settings.CSRF_SESSION_COOKIE_NAME, session_id, httponly=True)
    # Readable by page scripts so they can echo it in the header
    _set_cookie(response, settings.CSRF_COOKIE_NAME, token, httponly=False)
    return CSRFTokenResponse(token=token)


@router.delete("/csrf", response_model=DeleteResponse)
def invalidate_csrf_token(request: Request, response: Response) -> DeleteResponse:
    """Drop the session's token, e.g. on sign-out."""
    session_id = request.cookies.get(settings.CSRF_SESSION_COOKIE_NAME)
    if session_id:
        get_csrf_protector().invalidate(session_id)
    response.delete_cookie(settings.CSRF_COOKIE_NAME, path="/")
    response.delete_cookie(settings.CSRF_SESSION_COOKIE_NAME, path="/")
    return DeleteResponse(ok=True)
