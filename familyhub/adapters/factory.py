from typing import Dict, Optional, Type, Union

from familyhub.adapters.academics import AcademicsEventAdapter
from familyhub.adapters.base import EventAdapter
from familyhub.adapters.general import GeneralEventAdapter
from familyhub.adapters.health import HealthEventAdapter
from familyhub.adapters.pets import PetsEventAdapter
from familyhub.adapters.travel import TravelEventAdapter
from familyhub.core.constants import EventType
from familyhub.security.csrf_client import CSRFClient


class EventAdapterFactory:
    """
    Factory class to create the adapter for an event type
    """

    _adapters: Dict[EventType, Type[EventAdapter]] = {
        EventType.GENERAL: GeneralEventAdapter,
        EventType.TRAVEL: TravelEventAdapter,
        EventType.HEALTH: HealthEventAdapter,
        EventType.PETS: PetsEventAdapter,
        EventType.ACADEMICS: AcademicsEventAdapter,
    }

    @classmethod
    def create(
        cls, event_type: Union[EventType, str, None], client: Optional[CSRFClient] = None
    ) -> EventAdapter:
        """
        Create the adapter for an event type. Unknown types get the general adapter.
        """
        try:
            key = EventType(event_type) if event_type else EventType.GENERAL
        except ValueError:
            key = EventType.GENERAL
        return cls._adapters[key](client)


def get_event_adapter(
    event_type: Union[EventType, str, None], client: Optional[CSRFClient] = None
) -> EventAdapter:
    return EventAdapterFactory.create(event_type, client)
