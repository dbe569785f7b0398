"""
Trip and sharing models for collaborative itineraries.
"""
from sqlalchemy import Column, String, Date, Text, JSON, Enum as SQLEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from tripboard.db.base import BaseModel
import enum


class TripPermission(str, enum.Enum):
    """Access level on a trip, ordered view < edit < owner."""
    VIEW = "view"
    EDIT = "edit"
    OWNER = "owner"


class Trip(BaseModel):
    """Trip model representing a shared itinerary."""
    __tablename__ = "trips"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    main_location = Column(String(200), nullable=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    image_path = Column(String(500), nullable=True)
    planning = Column(JSON, nullable=True)  # Client-owned document: packing list, ideas, tasks, notes

    # Relationships
    owner = relationship("User", back_populates="trips")
    segments = relationship(
        "Segment",
        back_populates="trip",
        order_by="(Segment.start_time, Segment.sort_order, Segment.id)",
        passive_deletes=True,
    )
    attachments = relationship(
        "Attachment",
        back_populates="trip",
        order_by="Attachment.id",
        passive_deletes=True,
    )
    shares = relationship(
        "TripShare",
        back_populates="trip",
        order_by="TripShare.created_at",
        passive_deletes=True,
    )


class TripShare(BaseModel):
    """Grant of view or edit access on a trip to a non-owner user."""
    __tablename__ = "trip_shares"
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_share_trip_user"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    permission = Column(SQLEnum(TripPermission), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="shares")
    user = relationship("User", back_populates="shares")
