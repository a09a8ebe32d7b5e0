"""
Idempotent sync of secondary records.

Calendar events and password entries are keyed by (source, source_reference),
documents by file_url. Every ensure call writes a pending audit row before
doing any work and a terminal row after. Expected failures come back as a
``SyncResult`` with ``ok=False``; nothing here raises for them.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from familyhub.core.constants import SyncOperationType, SyncStatus, SyncTarget
from familyhub.core.exceptions import SyncException
from familyhub.core.logging import get_request_logger
from familyhub.models.sync_audit import SyncAudit
from familyhub.repositories.calendar_event_repository import CalendarEventRepository
from familyhub.repositories.document_repository import DocumentRepository
from familyhub.repositories.google_calendar_repository import GoogleCalendarRepository
from familyhub.repositories.password_repository import PasswordRepository
from familyhub.repositories.sync_audit_repository import SyncAuditRepository
from familyhub.schemas.sync import (
    CalendarEventData,
    DocumentData,
    PasswordData,
    SyncResult,
)
from familyhub.utils.datetimes import resolve_event_window

INTERNAL_ERROR = "Internal error"

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
        for err in error.errors()
    )


def require_ok(result: SyncResult, what: str) -> str:
    """Return the synced record id or raise SyncException, for use inside composite steps."""
    if not result.ok or not result.id:
        raise SyncException(f"Failed to sync {what}: {result.error or 'unknown error'}")
    return result.id


class SyncService:
    """Upserts and removes calendar events, password entries and documents."""

    def __init__(
        self, db: Session, request_id: Optional[str] = None, user_id: Optional[str] = None
    ):
        self.db = db
        self.request_id = request_id or str(uuid.uuid4())
        self.user_id = user_id
        self.calendar_repository = CalendarEventRepository(db)
        self.password_repository = PasswordRepository(db)
        self.document_repository = DocumentRepository(db)
        self.audit_repository = SyncAuditRepository(db)
        self.google_calendar_repository = GoogleCalendarRepository(db)
        self.logger = get_request_logger(__name__, self.request_id)

    # Audit trail

    def log_audit(
        self,
        operation: SyncOperationType,
        source_table: str,
        source_id: Optional[str],
        target_table: Optional[str],
        target_id: Optional[str],
        status: SyncStatus,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[SyncAudit]:
        """Append one audit row. Failures are logged and ignored."""
        try:
            return self.audit_repository.create(
                {
                    "request_id": self.request_id,
                    "operation_type": operation.value,
                    "source_table": source_table,
                    "source_id": source_id,
                    "target_table": target_table,
                    "target_id": target_id,
                    "status": status.value,
                    "error_message": error,
                    "metadata_": metadata,
                    "created_by": self.user_id,
                    "completed_at": None
                    if status == SyncStatus.PENDING
                    else datetime.now(timezone.utc),
                }
            )
        except Exception as e:
            # The audit trail never fails the primary operation
            self.logger.error(f"Failed to log audit: {e}")
            return None

    def list_audit(
        self, request_id: Optional[str] = None, skip: int = 0, limit: int = 100
    ) -> List[SyncAudit]:
        if request_id:
            return self.audit_repository.list_for_request(request_id)
        return self.audit_repository.list_recent(skip=skip, limit=limit)

    # Calendar events

    def ensure_calendar_event(
        self, data: Union[CalendarEventData, Mapping[str, Any]]
    ) -> SyncResult:
        """Create or update the calendar event identified by (source, source_reference)."""
        try:
            event = self._coerce(CalendarEventData, data)
        except ValidationError as e:
            return SyncResult(ok=False, error=validation_message(e))

        try:
            return self._ensure_calendar_event(event)
        except Exception:
            self.logger.error("Unexpected error in ensure_calendar_event", exc_info=True)
            return SyncResult(ok=False, error=INTERNAL_ERROR)

    def _ensure_calendar_event(self, event: CalendarEventData) -> SyncResult:
        target = SyncTarget.CALENDAR_EVENTS
        self.logger.info(
            f"Ensuring calendar event for {event.source}/{event.source_reference}"
        )
        self.log_audit(
            SyncOperationType.SYNC,
            event.source,
            event.source_reference,
            target,
            None,
            SyncStatus.PENDING,
            metadata=event.metadata,
        )
        values = self._calendar_values(event)

        if event.source_reference:
            existing = self.calendar_repository.get_by_source(
                event.source, event.source_reference
            )
            if existing:
                existing_id = existing.id
                try:
                    updated = self.calendar_repository.update(
                        existing, {**values, "updated_at": datetime.now(timezone.utc)}
                    )
                except SQLAlchemyError as e:
                    self.logger.error(f"Failed to update calendar event: {e}")
                    self.log_audit(
                        SyncOperationType.UPDATE, event.source, event.source_reference,
                        target, existing_id, SyncStatus.FAILED, str(e),
                    )
                    return SyncResult(ok=False, error=str(e))

                self.log_audit(
                    SyncOperationType.UPDATE, event.source, event.source_reference,
                    target, updated.id, SyncStatus.SUCCESS,
                )
                return SyncResult(ok=True, id=updated.id, existed=True)

        try:
            created = self.calendar_repository.create(values)
        except IntegrityError as e:
            if event.source_reference:
                # Lost a race with a concurrent identical request
                existing = self.calendar_repository.get_by_source(
                    event.source, event.source_reference
                )
                if existing:
                    self.logger.info(
                        f"Calendar event {existing.id} was created concurrently, reusing it"
                    )
                    self.log_audit(
                        SyncOperationType.CREATE, event.source, event.source_reference,
                        target, existing.id, SyncStatus.SUCCESS, metadata={"existed": True},
                    )
                    return SyncResult(ok=True, id=existing.id, existed=True)
            return self._create_failed(event.source, event.source_reference, target, e)
        except SQLAlchemyError as e:
            return self._create_failed(event.source, event.source_reference, target, e)

        self.log_audit(
            SyncOperationType.CREATE, event.source, event.source_reference,
            target, created.id, SyncStatus.SUCCESS,
        )
        return SyncResult(ok=True, id=created.id, existed=False)

    def _calendar_values(self, event: CalendarEventData) -> Dict[str, Any]:
        start_time, end_time = resolve_event_window(
            event.start_time, event.end_time, event.all_day, event.metadata
        )
        meeting_link = event.meeting_link or event.virtual_link
        values: Dict[str, Any] = {
            "title": event.title,
            "description": event.description,
            "start_time": start_time,
            "end_time": end_time,
            "all_day": event.all_day,
            "location": event.location,
            "is_virtual": bool(event.is_virtual),
            "meeting_link": meeting_link,
            "category": event.category,
            "source": event.source,
            "source_reference": event.source_reference,
            "attendee_ids": list(event.attendee_ids),
            "attendees": list(event.attendees),
            "google_calendar_id": event.google_calendar_id,
            "reminder_minutes": event.reminder_minutes,
            "timezone": self._resolve_timezone(event),
            "metadata_": dict(event.metadata),
        }
        if self.user_id:
            values["created_by"] = self.user_id
        return values

    def _resolve_timezone(self, event: CalendarEventData) -> Optional[str]:
        if event.timezone:
            return event.timezone
        tz = event.metadata.get("timezone") or event.metadata.get("departure_timezone")
        if tz or not event.google_calendar_id:
            return tz
        try:
            return self.google_calendar_repository.get_time_zone(event.google_calendar_id)
        except SQLAlchemyError as e:
            self.logger.warning(
                f"Could not look up time zone of calendar {event.google_calendar_id}: {e}"
            )
            return None

    def remove_calendar_event(self, source: str, source_reference: str) -> SyncResult:
        """Delete by identity. Removing a missing event is not an error."""
        return self._remove(
            self.calendar_repository, SyncTarget.CALENDAR_EVENTS, source, source_reference
        )

    # Password entries

    def ensure_password_entry(self, data: Union[PasswordData, Mapping[str, Any]]) -> SyncResult:
        try:
            entry = self._coerce(PasswordData, data)
        except ValidationError as e:
            return SyncResult(ok=False, error=validation_message(e))

        try:
            return self._ensure_password_entry(entry)
        except Exception:
            self.logger.error("Unexpected error in ensure_password_entry", exc_info=True)
            return SyncResult(ok=False, error=INTERNAL_ERROR)

    def _ensure_password_entry(self, entry: PasswordData) -> SyncResult:
        target = SyncTarget.PASSWORDS
        self.logger.info(f"Ensuring password entry for {entry.source}/{entry.source_reference}")
        self.log_audit(
            SyncOperationType.SYNC, entry.source, entry.source_reference,
            target, None, SyncStatus.PENDING,
        )
        values: Dict[str, Any] = {
            "title": entry.name,
            "service_name": entry.name,
            "url": entry.website,
            "username": entry.username,
            "password": entry.password,
            "category": entry.category,
            "notes": entry.notes,
            "source": entry.source,
            "source_reference": entry.source_reference,
            "owner_id": entry.owner_id or self.user_id,
            "metadata_": dict(entry.metadata),
        }

        existing = self.password_repository.get_by_source(entry.source, entry.source_reference)
        if existing:
            existing_id = existing.id
            try:
                updated = self.password_repository.update(
                    existing, {**values, "updated_at": datetime.now(timezone.utc)}
                )
            except SQLAlchemyError as e:
                self.logger.error(f"Failed to update password: {e}")
                self.log_audit(
                    SyncOperationType.UPDATE, entry.source, entry.source_reference,
                    target, existing_id, SyncStatus.FAILED, str(e),
                )
                return SyncResult(ok=False, error=str(e))
            self.log_audit(
                SyncOperationType.UPDATE, entry.source, entry.source_reference,
                target, updated.id, SyncStatus.SUCCESS,
            )
            return SyncResult(ok=True, id=updated.id, existed=True)

        if self.user_id:
            values["created_by"] = self.user_id
        try:
            created = self.password_repository.create(values)
        except IntegrityError as e:
            existing = self.password_repository.get_by_source(entry.source, entry.source_reference)
            if existing:
                self.log_audit(
                    SyncOperationType.CREATE, entry.source, entry.source_reference,
                    target, existing.id, SyncStatus.SUCCESS, metadata={"existed": True},
                )
                return SyncResult(ok=True, id=existing.id, existed=True)
            return self._create_failed(entry.source, entry.source_reference, target, e)
        except SQLAlchemyError as e:
            return self._create_failed(entry.source, entry.source_reference, target, e)

        self.log_audit(
            SyncOperationType.CREATE, entry.source, entry.source_reference,
            target, created.id, SyncStatus.SUCCESS,
        )
        return SyncResult(ok=True, id=created.id, existed=False)

    def remove_password_entry(self, source: str, source_reference: str) -> SyncResult:
        return self._remove(
            self.password_repository, SyncTarget.PASSWORDS, source, source_reference
        )

    # Documents

    def ensure_document(self, data: Union[DocumentData, Mapping[str, Any]]) -> SyncResult:
        """Create or update the document stored at file_url."""
        try:
            document = self._coerce(DocumentData, data)
        except ValidationError as e:
            return SyncResult(ok=False, error=validation_message(e))

        try:
            return self._ensure_document(document)
        except Exception:
            self.logger.error("Unexpected error in ensure_document", exc_info=True)
            return SyncResult(ok=False, error=INTERNAL_ERROR)

    def _ensure_document(self, document: DocumentData) -> SyncResult:
        target = SyncTarget.DOCUMENTS
        source = document.source or target
        self.logger.info(f"Ensuring document for {source}/{document.source_reference}")
        self.log_audit(
            SyncOperationType.SYNC, source, document.source_reference,
            target, None, SyncStatus.PENDING, metadata={"file_url": document.file_url},
        )

        existing = self.document_repository.get_by_url(document.file_url)
        if existing:
            existing_id = existing.id
            changes: Dict[str, Any] = {
                "title": document.title,
                "category": document.category,
                "assigned_to": list(document.assigned_to),
                "metadata_": dict(document.metadata),
                "updated_at": datetime.now(timezone.utc),
            }
            if document.file_size is not None:
                changes["file_size"] = document.file_size
            if document.file_type:
                changes["file_type"] = document.file_type
            try:
                updated = self.document_repository.update(existing, changes)
            except SQLAlchemyError as e:
                self.logger.error(f"Failed to update document: {e}")
                self.log_audit(
                    SyncOperationType.UPDATE, source, document.source_reference,
                    target, existing_id, SyncStatus.FAILED, str(e),
                )
                return SyncResult(ok=False, error=str(e))
            self.log_audit(
                SyncOperationType.UPDATE, source, document.source_reference,
                target, updated.id, SyncStatus.SUCCESS,
            )
            return SyncResult(ok=True, id=updated.id, existed=True)

        values = document.model_dump(exclude={"metadata"})
        values["metadata_"] = dict(document.metadata)
        if self.user_id:
            values["uploaded_by"] = self.user_id
        try:
            created = self.document_repository.create(values)
        except IntegrityError as e:
            existing = self.document_repository.get_by_url(document.file_url)
            if existing:
                self.log_audit(
                    SyncOperationType.CREATE, source, document.source_reference,
                    target, existing.id, SyncStatus.SUCCESS, metadata={"existed": True},
                )
                return SyncResult(ok=True, id=existing.id, existed=True)
            return self._create_failed(source, document.source_reference, target, e)
        except SQLAlchemyError as e:
            return self._create_failed(source, document.source_reference, target, e)

        self.log_audit(
            SyncOperationType.CREATE, source, document.source_reference,
            target, created.id, SyncStatus.SUCCESS,
        )
        return SyncResult(ok=True, id=created.id, existed=False)

    # Helpers

    @staticmethod
    def _coerce(model: Type[PayloadT], data: Union[BaseModel, Mapping[str, Any]]) -> PayloadT:
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump()
        return model.model_validate(data)

    def _create_failed(
        self, source: str, source_reference: Optional[str], target: str, error: Exception
    ) -> SyncResult:
        self.logger.error(f"Failed to create {target} row: {error}")
        self.log_audit(
            SyncOperationType.CREATE, source, source_reference,
            target, None, SyncStatus.FAILED, str(error),
        )
        return SyncResult(ok=False, error=str(error))

    def _remove(self, repository: Any, target: str, source: str, source_reference: str) -> SyncResult:
        self.logger.info(f"Removing {target} row for {source}/{source_reference}")
        try:
            removed = repository.delete_by_source(source, source_reference)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to remove {target} row: {e}")
            self.log_audit(
                SyncOperationType.DELETE, source, source_reference,
                target, None, SyncStatus.FAILED, str(e),
            )
            return SyncResult(ok=False, error=str(e))
        except Exception:
            self.logger.error(f"Unexpected error removing {target} row", exc_info=True)
            return SyncResult(ok=False, error=INTERNAL_ERROR)

        self.log_audit(
            SyncOperationType.DELETE, source, source_reference,
            target, None, SyncStatus.SUCCESS, metadata={"removed": removed},
        )
        return SyncResult(ok=True)
