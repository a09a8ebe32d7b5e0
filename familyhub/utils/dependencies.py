from typing import Any, Callable, Dict, Type, TypeVar, cast

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from familyhub.db.session import get_db

# Type variable for service classes
T = TypeVar("T")

# Global registry of service factories
_service_registry: Dict[Type[Any], Callable[..., Any]] = {}


def register_service(service_class: Type[T], factory: Callable[..., T]) -> None:
    """
    Register a service factory function.

    Args:
        service_class: The class of the service
        factory: Function that creates an instance of the service from a DB session
    """
    _service_registry[service_class] = factory


def get_service(service_class: Type[T]) -> Callable[..., T]:
    """
    Get a dependency provider for a service.

    Services not registered yet are registered with a default factory that
    builds the instance from the request's database session. One instance is
    cached per request on request.state.

    Args:
        service_class: The class of the service to provide

    Returns:
        A FastAPI dependency that provides the service
    """
    # Fall back to constructing the service from the session
    if service_class not in _service_registry:
        register_service(service_class, lambda db: service_class(db))

    def _get_service(request: Request, db: Session = Depends(get_db)) -> T:
        # Reuse the instance already built for this request
        service_key = f"service:{service_class.__name__}"
        if hasattr(request.state, service_key):
            return cast(T, getattr(request.state, service_key))

        # Build and remember it on request.state
        service = _service_registry[service_class](db)
        setattr(request.state, service_key, service)
        return service

    return _get_service
