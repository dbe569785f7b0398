"""
Pydantic schemas for Segment entity.

Flight enrichment fields appear only on responses; clients cannot set them.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime
from tripboard.models.segment import SegmentType, TransportMode, FlightFetchStatus
from tripboard.schemas.attachment import AttachmentResponse


class SegmentBase(BaseModel):
    """Base segment schema."""
    type: SegmentType
    transport_mode: Optional[TransportMode] = None
    title: str
    start_time: datetime
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    provider: Optional[str] = None
    confirmation_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    sort_order: int = 0
    flight_number: Optional[str] = None
    seat_number: Optional[str] = None
    passenger_name: Optional[str] = None


class SegmentCreate(SegmentBase):
    """Schema for segment creation."""
    pass


class SegmentUpdate(BaseModel):
    """Schema for segment update. Only fields that are sent are changed."""
    type: Optional[SegmentType] = None
    transport_mode: Optional[TransportMode] = None
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    provider: Optional[str] = None
    confirmation_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    sort_order: Optional[int] = None
    flight_number: Optional[str] = None
    seat_number: Optional[str] = None
    passenger_name: Optional[str] = None


class SegmentResponse(SegmentBase):
    """Schema for segment response, including flight enrichment."""
    id: int
    trip_id: int
    flight_status: Optional[str] = None
    flight_airline: Optional[str] = None
    flight_departure: Optional[Dict[str, Any]] = None
    flight_arrival: Optional[Dict[str, Any]] = None
    flight_delay_minutes: Optional[int] = None
    flight_gate_departure: Optional[str] = None
    flight_gate_arrival: Optional[str] = None
    flight_terminal_dep: Optional[str] = None
    flight_terminal_arr: Optional[str] = None
    flight_baggage: Optional[str] = None
    flight_last_fetched_at: Optional[datetime] = None
    flight_last_fetch_status: Optional[FlightFetchStatus] = None
    flight_auto_sync: bool = False
    attachments: List[AttachmentResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
