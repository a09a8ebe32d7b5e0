import logging
from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from familyhub.core.exceptions import BusinessException

# Set up module logger
logger = logging.getLogger(__name__)


def _request_extra(request: Request) -> Dict[str, str]:
    """Request fields attached to every handler log line."""
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "path": request.url.path,
        "method": request.method,
        "client_host": request.client.host if request.client else "unknown",
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance
    """

    # Business exceptions
    @app.exception_handler(BusinessException)
    async def business_exception_handler(
        request: Request, exc: BusinessException
    ) -> JSONResponse:
        """
        Converts business exceptions to a standardized JSON response.
        """
        # Server-side failures (sync, timeouts) are errors, the rest is caller input
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"Business exception: {exc.code}: {exc.message}",
            extra={**_request_extra(request), "details": exc.details},
        )

        content = {
            "error": exc.code,
            "message": exc.message,
        }
        # Details only when the exception carries some
        if exc.details:
            content["details"] = exc.details

        return JSONResponse(status_code=exc.status_code, content=content)

    # Request validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """
        Flattens pydantic validation errors into a field -> message map.
        """
        simplified_errors: Dict[str, str] = {}

        for error in exc.errors():
            loc = error.get("loc", [])
            # Drop the request part (body, query, path) from the location
            if loc and loc[0] in ("body", "query", "path"):
                loc = loc[1:]

            # Dotted field path
            field = ".".join(str(x) for x in loc)
            simplified_errors[field] = error.get("msg", "Validation error")

        logger.warning(
            f"Validation error: {simplified_errors}", extra=_request_extra(request)
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "validation_error",
                "message": "Input validation failed",
                "details": simplified_errors,
            },
        )

    # Anything else is an internal error
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """
        Logs unexpected exceptions and returns a generic error so that
        internals never leak to the caller.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            exc_info=True,
            extra=_request_extra(request),
        )

        # Details stay in the logs
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "Internal error"},
        )
