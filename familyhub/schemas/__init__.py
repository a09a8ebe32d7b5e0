# familyhub/schemas/__init__.py
from familyhub.schemas.sync import (
    SyncResult,
    CalendarEventData,
    PasswordData,
    DocumentData,
    SyncAudit,
)
from familyhub.schemas.calendar_event import (
    CalendarEvent,
    CalendarEventCreate,
    CalendarEventInput,
    CalendarEventResponse,
    CalendarEventUpdate,
)
from familyhub.schemas.records import PasswordEntry, Document, DocumentResponse
from familyhub.schemas.domain import (
    TravelDetail,
    TravelDetailCreate,
    TravelDetailResponse,
    HealthAppointmentCreate,
    HealthAppointmentResponse,
    PetAppointmentCreate,
    PetAppointmentResponse,
    AcademicEvent,
    AcademicEventCreate,
    AcademicEventResponse,
    Doctor,
    DoctorCreate,
    DoctorUpdate,
    DoctorResponse,
    Portal,
    PortalCreate,
    PortalUpdate,
    PortalResponse,
    DeleteResponse,
)
from familyhub.schemas.events import (
    EventForm,
    TravelEventForm,
    HealthEventForm,
    PetsEventForm,
    AcademicsEventForm,
)
from familyhub.schemas.csrf import CSRFTokenResponse
