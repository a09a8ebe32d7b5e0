# familyhub/core/constants.py
import enum

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class SyncOperationType(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SYNC = "sync"


class SyncStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


class StepType(str, enum.Enum):
    CALENDAR = "calendar"
    PASSWORD = "password"
    DOCUMENT = "document"
    TASK = "task"
    CUSTOM = "custom"


class EventType(str, enum.Enum):
    GENERAL = "general"
    TRAVEL = "travel"
    HEALTH = "health"
    PETS = "pets"
    ACADEMICS = "academics"


# Values of the `source` column written by each feature
class EventSource:
    CALENDAR = "calendar"
    TRAVEL = "travel"
    HEALTH = "health"
    PETS = "pets"
    ACADEMICS = "academics"


# Target tables of the sync engine
class SyncTarget:
    CALENDAR_EVENTS = "calendar_events"
    PASSWORDS = "passwords"
    DOCUMENTS = "documents"


class PortalType(str, enum.Enum):
    MEDICAL = "medical"
    PET = "pet"
    ACADEMIC = "academic"
    TRAVEL = "travel"


PORTAL_PASSWORD_CATEGORIES = {
    PortalType.MEDICAL: "health",
    PortalType.PET: "pets",
    PortalType.ACADEMIC: "education",
    PortalType.TRAVEL: "travel",
}
