"""
Event time normalization.

Calendar times travel as text. Three input shapes are accepted:

* date only            ``2024-03-01``
* naive datetime       ``2024-03-01T09:00`` / ``2024-03-01 09:00:00``
* offset-qualified     ``2024-03-01T09:00:00-05:00`` / ``...Z``

Naive values are local wall-clock time in a zone that may not be known yet,
so they are never converted to UTC. Offsets are preserved as given.
"""
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Mapping, Optional, Tuple

from familyhub.core.config import settings

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")

# Metadata keys that may carry an upstream provider's echoed end time, in
# the order they are tried when the explicit end is unusable.
END_TIME_METADATA_KEYS = ("google_end_time", "original_end_time", "provider_end_time")


def _is_zulu(value: str) -> bool:
    return value.strip()[-1:] in ("Z", "z")


def parse_event_datetime(value: str) -> datetime:
    """Parse any accepted event time shape. Raises ValueError when it is none of them."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid event time: {value!r}")

    text = value.strip()
    if _DATE_ONLY.match(text):
        return datetime.combine(date.fromisoformat(text), time())

    if _is_zulu(text):
        text = text[:-1] + "+00:00"
    elif "T" in text or " " in text:
        text = _COMPACT_OFFSET.sub(r"\1:\2", text)

    return datetime.fromisoformat(text.replace(" ", "T", 1))


def format_event_datetime(value: datetime, zulu: bool = False) -> str:
    """Canonical text form: seconds precision, offset kept when present."""
    text = value.replace(microsecond=0).isoformat()
    if zulu and value.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def normalize_event_datetime(value: str) -> str:
    """
    Canonicalize an event time.

    >>> normalize_event_datetime("2024-03-01")
    '2024-03-01T00:00:00'
    >>> normalize_event_datetime("2024-03-01T09:00:00-05:00")
    '2024-03-01T09:00:00-05:00'
    """
    return format_event_datetime(parse_event_datetime(value), zulu=_is_zulu(value))


def add_minutes(value: str, minutes: int) -> str:
    """Shift an event time, keeping it naive or offset-qualified as it was."""
    shifted = parse_event_datetime(value) + timedelta(minutes=minutes)
    return format_event_datetime(shifted, zulu=_is_zulu(value))


def build_event_datetime(
    day: str, clock: Optional[str], all_day: bool, is_end: bool = False
) -> str:
    """
    Combine a form's date and time fields.

    All-day ends are exclusive: the stored end is the following day at
    midnight.
    """
    if all_day:
        start_of_day = date.fromisoformat(day)
        if is_end:
            start_of_day += timedelta(days=1)
        return f"{start_of_day.isoformat()}T00:00:00"

    clock = (clock or "00:00").strip()
    if len(clock) == 5:
        clock = f"{clock}:00"
    return f"{day}T{clock}"


def _is_after(candidate: datetime, start: datetime) -> bool:
    if (candidate.tzinfo is None) != (start.tzinfo is None):
        # Mixed naive/aware: compare wall-clock readings
        return candidate.replace(tzinfo=None) > start.replace(tzinfo=None)
    return candidate > start


def _duration_from_metadata(metadata: Mapping[str, Any]) -> Optional[int]:
    duration = metadata.get("duration_minutes")
    if isinstance(duration, bool) or not isinstance(duration, int):
        return None
    return duration if duration > 0 else None


def resolve_event_window(
    start_time: str,
    end_time: Optional[str],
    all_day: bool,
    metadata: Optional[Mapping[str, Any]] = None,
    default_minutes: Optional[int] = None,
) -> Tuple[str, str]:
    """
    Return the canonical (start, end) pair stored for an event.

    Timed events must end strictly after they start. Candidates are tried in
    order: the explicit end, then the provider-echoed ends in metadata; if
    none is usable the end is start + metadata duration_minutes, or start +
    the default duration. Some calendar webhooks deliver zero-length
    recurring instances, which this repairs.
    """
    metadata = metadata or {}
    start = parse_event_datetime(start_time)

    if all_day:
        first_day = start.date()
        last_day: Optional[date] = None
        if end_time:
            try:
                last_day = parse_event_datetime(end_time).date()
            except ValueError:
                last_day = None
        if last_day is None or last_day <= first_day:
            last_day = first_day + timedelta(days=1)
        return f"{first_day.isoformat()}T00:00:00", f"{last_day.isoformat()}T00:00:00"

    canonical_start = format_event_datetime(start, zulu=_is_zulu(start_time))

    candidates = [end_time] + [metadata.get(key) for key in END_TIME_METADATA_KEYS]
    for candidate in candidates:
        if not isinstance(candidate, str) or not candidate.strip():
            continue
        try:
            parsed = parse_event_datetime(candidate)
        except ValueError:
            continue
        if _is_after(parsed, start):
            return canonical_start, format_event_datetime(parsed, zulu=_is_zulu(candidate))

    minutes = (
        _duration_from_metadata(metadata)
        or default_minutes
        or settings.DEFAULT_EVENT_DURATION_MINUTES
    )
    return canonical_start, add_minutes(canonical_start, minutes)


def travel_date_of(value: str) -> str:
    """Calendar date (YYYY-MM-DD) of an event time."""
    return parse_event_datetime(value).date().isoformat()
