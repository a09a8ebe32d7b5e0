# familyhub/models/__init__.py
from familyhub.models.user import User
from familyhub.models.calendar_event import CalendarEvent
from familyhub.models.password import PasswordEntry
from familyhub.models.document import Document
from familyhub.models.sync_audit import SyncAudit
from familyhub.models.csrf_token import CSRFToken
from familyhub.models.google_calendar import GoogleCalendar
from familyhub.models.task import Task
from familyhub.models.travel import TravelDetail
from familyhub.models.academic_event import AcademicEvent
from familyhub.models.doctor import Doctor
from familyhub.models.portal import Portal
