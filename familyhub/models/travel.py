from sqlalchemy import JSON, Column, DateTime, String, Text

from familyhub.db.base import Base
from familyhub.models._columns import generate_id, utc_now


class TravelDetail(Base):
    """One leg of a trip. Legs of the same trip share trip_id."""

    __tablename__ = "travel_details"

    id = Column(String(36), primary_key=True, default=generate_id)
    trip_id = Column(String(36), index=True, nullable=True)
    type = Column(String, default="other")  # flight | train | car_rental | ...
    title = Column(String, nullable=True)
    travel_date = Column(String(10), nullable=True)
    departure_time = Column(String(40), nullable=False)
    arrival_time = Column(String(40), nullable=True)
    departure_timezone = Column(String, nullable=True)
    arrival_timezone = Column(String, nullable=True)
    airline = Column(String, nullable=True)
    flight_number = Column(String, nullable=True)
    departure_airport = Column(String, nullable=True)
    arrival_airport = Column(String, nullable=True)
    confirmation_number = Column(String, nullable=True)
    accommodation_name = Column(String, nullable=True)
    accommodation_type = Column(String, nullable=True)
    location = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    traveler_ids = Column(JSON, default=list)
    additional_attendees = Column(JSON, default=list)
    calendar_event_id = Column(String(36), nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
