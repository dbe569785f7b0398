"""
Segment model: a single itinerary entry within a trip.
"""
from sqlalchemy import Column, String, DateTime, Boolean, JSON, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripboard.db.base import BaseModel
import enum


class SegmentType(str, enum.Enum):
    """Kind of itinerary entry."""
    TRANSPORT = "transport"
    ACCOMMODATION = "accommodation"
    ACTIVITY = "activity"
    NOTE = "note"


class TransportMode(str, enum.Enum):
    """Mode of a transport segment."""
    FLIGHT = "flight"
    TRAIN = "train"
    BUS = "bus"
    TAXI = "taxi"
    RIDESHARE = "rideshare"
    DRIVE = "drive"


class FlightFetchStatus(str, enum.Enum):
    """Outcome of the most recent flight data lookup."""
    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


class Segment(BaseModel):
    """Segment model. Flight enrichment columns are written only by the flight service."""
    __tablename__ = "segments"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    type = Column(SQLEnum(SegmentType), nullable=False)
    transport_mode = Column(SQLEnum(TransportMode), nullable=True, index=True)
    title = Column(String(200), nullable=False)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    provider = Column(String(255), nullable=True)
    confirmation_code = Column(String(100), nullable=True)
    details = Column(JSON, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)

    # Flight booking
    flight_number = Column(String(20), nullable=True)
    seat_number = Column(String(20), nullable=True)
    passenger_name = Column(String(200), nullable=True)

    # Flight enrichment
    flight_status = Column(String(50), nullable=True)
    flight_airline = Column(String(200), nullable=True)
    flight_departure = Column(JSON, nullable=True)
    flight_arrival = Column(JSON, nullable=True)
    flight_delay_minutes = Column(Integer, nullable=True)
    flight_gate_departure = Column(String(20), nullable=True)
    flight_gate_arrival = Column(String(20), nullable=True)
    flight_terminal_dep = Column(String(20), nullable=True)
    flight_terminal_arr = Column(String(20), nullable=True)
    flight_baggage = Column(String(50), nullable=True)
    flight_meta = Column(JSON, nullable=True)

    # Flight sync bookkeeping
    flight_last_fetched_at = Column(DateTime, nullable=True)
    flight_last_fetch_status = Column(SQLEnum(FlightFetchStatus), nullable=True)
    flight_lookup_key = Column(String(40), nullable=True)  # "<number>/<YYYY-MM-DD>" of the last lookup
    flight_auto_sync = Column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    trip = relationship("Trip", back_populates="segments")
    attachments = relationship(
        "Attachment",
        back_populates="segment",
        order_by="Attachment.id",
        passive_deletes=True,
    )
