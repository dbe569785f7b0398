"""
Pydantic schemas for Trip and TripShare entities.
"""
from pydantic import BaseModel, EmailStr
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from tripboard.models.trip import TripPermission
from tripboard.schemas.attachment import AttachmentResponse
from tripboard.schemas.segment import SegmentResponse
from tripboard.schemas.user import UserResponse


class TripBase(BaseModel):
    """Base trip schema."""
    title: str
    main_location: Optional[str] = None
    start_date: date
    end_date: date
    notes: Optional[str] = None


class TripCreate(TripBase):
    """Schema for trip creation."""
    pass


class TripUpdate(BaseModel):
    """Schema for trip update."""
    title: Optional[str] = None
    main_location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    user_id: int
    image_path: Optional[str] = None
    access_permission: Optional[TripPermission] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Trip aggregate: segments (with their attachments) and trip-level attachments."""
    segments: List[SegmentResponse] = []
    attachments: List[AttachmentResponse] = []


class PlanningDocument(BaseModel):
    """Opaque planning document (packing list, ideas, tasks, notes)."""
    planning: Dict[str, Any]


class TripShareCreate(BaseModel):
    """Share target by user id or by email (exactly one)."""
    user_id: Optional[int] = None
    email: Optional[EmailStr] = None
    permission: TripPermission


class TripShareResponse(BaseModel):
    """Schema for trip share response."""
    id: int
    trip_id: int
    permission: TripPermission
    user: UserResponse
    created_at: datetime

    class Config:
        from_attributes = True
