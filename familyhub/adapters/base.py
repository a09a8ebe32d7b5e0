"""
Client-side event adapters.

An adapter takes the unified event form, checks the fields its domain
requires, maps the form to the wire shape of the domain's API and posts it
through a CSRF-aware client. Validation problems come back as readable
strings before any request is made. Request failures come back as an
unsuccessful ``EventAdapterResult``; nothing is retried.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type, Union

import httpx
from pydantic import ValidationError

from familyhub.core.config import settings
from familyhub.core.constants import EventType
from familyhub.schemas.events import EventForm
from familyhub.security.csrf_client import CSRFClient
from familyhub.utils.datetimes import build_event_datetime

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class EventAdapterResult:
    success: bool
    domain_id: Optional[str] = None
    calendar_event_id: Optional[str] = None
    error: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    google_synced: bool = False


class AdapterRequestError(Exception):
    """A domain API answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def split_attendees(value: Union[List[str], str, None]) -> List[str]:
    """Attendee emails arrive as a list or a comma separated string."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [entry.strip() for entry in value if entry and entry.strip()]


def notify_attendees_flag(form: EventForm) -> Optional[bool]:
    """
    Resolve the notify flag from the shapes older forms still send.

    The camelCase key wins over the snake_case key, which wins over the
    metadata flag. None means the caller did not say.
    """
    extra = form.model_extra or {}
    for value in (
        extra.get("notifyAttendees"),
        extra.get("notify_attendees"),
        form.metadata.get("notify_attendees"),
    ):
        if value is not None:
            return bool(value)
    return None


def response_error(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if not isinstance(body, Mapping):
        return default
    message = body.get("message") or body.get("error")
    return message if isinstance(message, str) and message else default


class EventAdapter(ABC):
    """
    Abstract base class for the per-domain event adapters
    """

    type: ClassVar[EventType]
    label: ClassVar[str]
    form_class: ClassVar[Type[EventForm]] = EventForm
    endpoint: ClassVar[str]
    failure_message: ClassVar[str] = "Failed to create event"

    def __init__(self, client: Optional[CSRFClient] = None):
        self.client = client or CSRFClient()

    @property
    def url(self) -> str:
        return f"{settings.API_STR}{self.endpoint}"

    def parse(self, data: Union[EventForm, Mapping[str, Any]]) -> EventForm:
        if isinstance(data, self.form_class):
            return data
        if isinstance(data, EventForm):
            data = data.model_dump()
        return self.form_class.model_validate(data)

    @abstractmethod
    def validate_fields(self, form: EventForm) -> ValidationResult:
        """Check the fields this domain requires."""

    @abstractmethod
    def map_to_api_payload(self, form: EventForm) -> Dict[str, Any]:
        """Translate the form into the body the domain API expects."""

    @abstractmethod
    def interpret(self, body: Mapping[str, Any]) -> EventAdapterResult:
        """Read the ids out of a successful response body."""

    def wrap(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return payload

    # Helpers shared by the date/time based forms

    @staticmethod
    def start_of(form: EventForm) -> str:
        return build_event_datetime(form.start_date, form.start_time, form.all_day)

    @staticmethod
    def end_of(form: EventForm) -> Optional[str]:
        if not form.end_date:
            return None
        return build_event_datetime(form.end_date, form.end_time, form.all_day, is_end=True)

    @staticmethod
    def require_common(form: EventForm, errors: List[str]) -> None:
        if not form.title.strip():
            errors.append("Title is required")
        if not form.start_date:
            errors.append("Start date is required")

    # Requests

    async def post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST one payload; raise AdapterRequestError on an error status."""
        try:
            response = await self.client.post(
                self.url,
                json=self.wrap(payload),
                headers={"x-request-id": str(uuid.uuid4())},
            )
        except httpx.HTTPError as e:
            logger.error(f"Error creating {self.type.value} event: {e}")
            raise AdapterRequestError(self.failure_message) from e
        if response.is_error:
            raise AdapterRequestError(
                response_error(response, self.failure_message), response.status_code
            )
        return response.json()

    def check(self, data: Union[EventForm, Mapping[str, Any]]):
        """Parse and validate. Returns (form, None) or (None, failed result)."""
        try:
            form = self.parse(data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            return None, EventAdapterResult(success=False, error=errors[0], errors=errors)

        validation = self.validate_fields(form)
        if not validation.valid:
            return None, EventAdapterResult(
                success=False, error=validation.errors[0], errors=validation.errors
            )
        return form, None

    async def create_event(self, data: Union[EventForm, Mapping[str, Any]]) -> EventAdapterResult:
        form, failed = self.check(data)
        if failed is not None:
            return failed

        try:
            payload = self.map_to_api_payload(form)
        except ValueError as e:
            return EventAdapterResult(success=False, error=f"Invalid date or time: {e}", errors=[str(e)])

        try:
            body = await self.post(payload)
        except AdapterRequestError as e:
            logger.warning(f"{self.label}: {e.message} (status={e.status_code})")
            return EventAdapterResult(success=False, error=e.message)
        return self.interpret(body)

    async def rollback(self, result: EventAdapterResult) -> None:
        """Delete the domain record a previous create_event produced."""
        if not result.domain_id:
            return
        try:
            response = await self.client.delete(f"{self.url}/{result.domain_id}")
            if response.is_error:
                logger.error(
                    f"Rolling back {self.type.value} event {result.domain_id} failed: "
                    f"{response_error(response, str(response.status_code))}"
                )
        except httpx.HTTPError as e:
            logger.error(f"Error rolling back {self.type.value} event: {e}")
