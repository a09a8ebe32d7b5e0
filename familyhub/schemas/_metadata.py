"""Boundary validation for the free-form metadata bag carried by events."""
from typing import Any, Dict, Optional

from familyhub.utils.datetimes import END_TIME_METADATA_KEYS

_STRING_KEYS = ("timezone", "departure_timezone") + END_TIME_METADATA_KEYS


def validate_event_metadata(value: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Check the types of well-known keys; unknown keys pass through untouched.

    Well-known keys: timezone, departure_timezone, duration_minutes,
    notify_attendees, additional_attendees and the provider-echoed end times.
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("metadata must be an object")

    for key in _STRING_KEYS:
        if value.get(key) is not None and not isinstance(value[key], str):
            raise ValueError(f"metadata.{key} must be a string")

    duration = value.get("duration_minutes")
    if duration is not None and (
        isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0
    ):
        raise ValueError("metadata.duration_minutes must be a positive integer")

    notify = value.get("notify_attendees")
    if notify is not None and not isinstance(notify, bool):
        raise ValueError("metadata.notify_attendees must be a boolean")

    extra_attendees = value.get("additional_attendees")
    if extra_attendees is not None and (
        not isinstance(extra_attendees, list)
        or not all(isinstance(email, str) for email in extra_attendees)
    ):
        raise ValueError("metadata.additional_attendees must be a list of strings")

    return value
