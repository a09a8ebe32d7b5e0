# familyhub/core/exceptions.py
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BusinessException(Exception):
    """Base exception for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "business_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert this exception to an HTTPException"""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "error": self.code,
                "message": self.message,
                **({"details": self.details} if self.details else {}),
            },
        )


class ResourceNotFoundException(BusinessException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "resource_not_found"


class ValidationException(BusinessException):
    """Raised when input validation fails."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "validation_error"


class AuthenticationException(BusinessException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "authentication_error"


class AuthorizationException(BusinessException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "authorization_error"


class SyncException(BusinessException):
    """Raised when a secondary record (calendar, password, document) cannot be synced."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "sync_failed"


class ServiceTimeoutException(BusinessException):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "service_timeout"
