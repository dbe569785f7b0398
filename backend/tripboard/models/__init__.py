"""Models package - Import all models for SQLAlchemy registration."""
from tripboard.models.user import User, UserRole, UserStatus
from tripboard.models.trip import Trip, TripShare, TripPermission
from tripboard.models.segment import Segment, SegmentType, TransportMode, FlightFetchStatus
from tripboard.models.attachment import Attachment
from tripboard.models.setting import Setting

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Trip",
    "TripShare",
    "TripPermission",
    "Segment",
    "SegmentType",
    "TransportMode",
    "FlightFetchStatus",
    "Attachment",
    "Setting",
]
