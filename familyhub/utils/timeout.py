import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from familyhub.core.exceptions import ServiceTimeoutException

# Set up module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(
    awaitable: Awaitable[T], timeout: Optional[float], error_message: str = "Operation timed out"
) -> T:
    """
    Await with a deadline.

    Args:
        awaitable: The coroutine or future to await
        timeout: Timeout in seconds; None waits indefinitely
        error_message: Custom error message for timeout

    Raises:
        ServiceTimeoutException: If the deadline passes first
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"Timeout error: {error_message} (limit: {timeout}s)")
        raise ServiceTimeoutException(error_message)
