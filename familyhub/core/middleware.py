import logging
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from familyhub.core.config import settings
from familyhub.core.constants import SAFE_METHODS
from familyhub.core.logging import request_context
from familyhub.security.csrf import get_csrf_protector

# Set up logger
logger = logging.getLogger(__name__)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.

    The request ID correlates every sync step of one logical operation. It is
    taken from the incoming header when present, stored on request.state and
    echoed as a response header.
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Request-ID",
        environment_header: Optional[str] = "X-Environment",
    ):
        super().__init__(app)
        self.header_name = header_name
        self.environment_header = environment_header

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        if self.environment_header:
            request.state.environment = request.headers.get(self.environment_header, "unknown")

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as exc:
            self._log_exception(request, exc, start_time)
            raise

        response.headers[self.header_name] = request_id
        if self.environment_header and hasattr(request.state, "environment"):
            response.headers[self.environment_header] = request.state.environment

        self._log_request(request, response, start_time)
        return response

    @staticmethod
    def _url(request: Request) -> str:
        if request.query_params:
            return f"{request.url.path}?{request.query_params}"
        return request.url.path

    def _log_request(
        self, request: Request, response: Response, start_time: float
    ) -> None:
        """Log details about the request and response."""
        status_code = response.status_code
        log_dict = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "url": self._url(request),
            "status_code": status_code,
            "process_time_ms": round((time.time() - start_time) * 1000, 2),
            "client_host": request.client.host if request.client else "unknown",
        }

        if status_code >= 500:
            logger.error(f"Request failed: {log_dict}")
        elif status_code >= 400:
            logger.warning(f"Request error: {log_dict}")
        else:
            logger.info(f"Request completed: {log_dict}")

    def _log_exception(
        self, request: Request, exc: Exception, start_time: float
    ) -> None:
        """Log unhandled exceptions."""
        log_dict = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "url": self._url(request),
            "process_time_ms": round((time.time() - start_time) * 1000, 2),
            "client_host": request.client.host if request.client else "unknown",
            "exception": str(exc),
        }
        logger.error(f"Unhandled exception during request: {log_dict}", exc_info=True)


class LogContextMiddleware(BaseHTTPMiddleware):
    """
    Pushes request id, method, path and client host into the logging context
    for everything logged while the request is processed.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "client_host": request.client.host if request.client else "unknown",
        }
        token = request_context.set(context)
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Rejects mutating requests that fail anti-forgery validation with a 403
    before they reach any route.
    """

    def __init__(self, app: ASGIApp, exempt_paths: Optional[list] = None):
        super().__init__(app)
        self.exempt_paths = tuple(exempt_paths or ())

    def _is_exempt(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.exempt_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if (
            not settings.CSRF_ENABLED
            or request.method in SAFE_METHODS
            or self._is_exempt(request.url.path)
        ):
            return await call_next(request)

        protector = get_csrf_protector()
        check = await run_in_threadpool(
            protector.check_request, request.method, request.headers, request.cookies
        )
        if not check.valid:
            logger.warning(
                f"CSRF validation failed: {check.error} "
                f"(method={request.method}, path={request.url.path})"
            )
            return JSONResponse(status_code=403, content={"error": check.error})

        if check.trusted:
            logger.debug(f"Trusted service request to {request.url.path}")
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    """
    Register all middlewares with the FastAPI app.

    Note: Middleware is executed in reverse order of registration
    (last registered is executed first).

    Args:
        app: The FastAPI application instance
    """
    # Innermost: runs with the request id and log context already in place
    app.add_middleware(CSRFMiddleware, exempt_paths=settings.CSRF_EXEMPT_PATHS)

    app.add_middleware(LogContextMiddleware)

    # Outermost: assigns the request id
    app.add_middleware(
        RequestIdMiddleware,
        header_name="X-Request-ID",
        environment_header="X-Environment",
    )
