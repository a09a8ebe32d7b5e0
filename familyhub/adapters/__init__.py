from familyhub.adapters.base import EventAdapter, EventAdapterResult, ValidationResult
from familyhub.adapters.factory import get_event_adapter

__all__ = ["EventAdapter", "EventAdapterResult", "ValidationResult", "get_event_adapter"]
