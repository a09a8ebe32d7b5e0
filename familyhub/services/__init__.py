"""
Service registry module.

This module registers all services with the dependency injection system.
"""
from familyhub.services.academic_service import AcademicService
from familyhub.services.calendar_event_service import CalendarEventService
from familyhub.services.document_service import DocumentService
from familyhub.services.health_service import HealthService
from familyhub.services.pet_service import PetService
from familyhub.services.portal_service import PortalService
from familyhub.services.sync_service import SyncService
from familyhub.services.travel_service import TravelService


def register_services():
    """Register all services with the dependency injection system."""
    # Import register_service inside the function to avoid circular imports
    from familyhub.utils.dependencies import register_service

    register_service(SyncService, lambda db: SyncService(db))
    register_service(CalendarEventService, lambda db: CalendarEventService(db))
    register_service(TravelService, lambda db: TravelService(db))
    register_service(HealthService, lambda db: HealthService(db))
    register_service(PetService, lambda db: PetService(db))
    register_service(AcademicService, lambda db: AcademicService(db))
    register_service(PortalService, lambda db: PortalService(db))
    register_service(DocumentService, lambda db: DocumentService(db))
