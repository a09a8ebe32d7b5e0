import contextlib
import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

from familyhub.core.config import settings

# Global context variable for request information
request_context = contextvars.ContextVar("request_context", default={})


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        record_dict: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Attach the traceback when the record carries one
        if record.exc_info:
            record_dict["exception"] = self.formatException(record.exc_info)

        # Extra attributes passed via extra={"extras": {...}}
        extras = getattr(record, "extras", None)
        if isinstance(extras, dict):
            record_dict.update(extras)

        # Request context fills in, never overrides
        for key, value in request_context.get().items():
            record_dict.setdefault(key, value)

        return json.dumps(record_dict, default=str)


class ContextFilter(logging.Filter):
    """
    Copies the current request context onto each log record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        # Fields already set on the record win
        for key, value in request_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class RequestLogAdapter(logging.LoggerAdapter):
    """
    Prefixes messages with the logical request id so that every step of one
    sync operation can be correlated in plain-text logs.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['request_id']}] {msg}", kwargs


def get_request_logger(name: str, request_id: str) -> RequestLogAdapter:
    return RequestLogAdapter(logging.getLogger(name), {"request_id": request_id})


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the application.

    Args:
        level: Optional log level override (default to settings)
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Drop handlers left by a previous setup
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(ContextFilter())

    # JSON lines in production, plain text elsewhere
    if settings.ENVIRONMENT == "production":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s (%(filename)s:%(lineno)d) - %(message)s"
        )

    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # Optional file handler
    if settings.LOG_FILE:
        try:
            log_dir = Path(settings.LOG_FILE).parent
            os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.FileHandler(settings.LOG_FILE)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(ContextFilter())
            file_handler.setLevel(log_level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not set up file logging at {settings.LOG_FILE}: {e}")

    # Reduce noise from third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger("familyhub")


@contextlib.contextmanager
def log_context(**context_data):
    """
    Context manager for adding context to logs.

    Usage:
        with log_context(user_id="u-1", action="create_appointment"):
            logger.info("Creating appointment")
    """
    # Layer the new fields over the current context
    current_context = request_context.get().copy()
    current_context.update(context_data)
    token = request_context.set(current_context)

    try:
        yield
    finally:
        # Back to the outer context
        request_context.reset(token)
