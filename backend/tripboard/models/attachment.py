"""
Attachment model for files linked to a trip or a segment.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from tripboard.db.base import BaseModel


class Attachment(BaseModel):
    """Uploaded file owned by exactly one trip or one segment."""
    __tablename__ = "attachments"
    __table_args__ = (
        CheckConstraint(
            "(trip_id IS NULL) <> (segment_id IS NULL)",
            name="ck_attachment_single_owner",
        ),
    )

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=True, index=True)
    segment_id = Column(Integer, ForeignKey("segments.id"), nullable=True, index=True)
    path = Column(String(500), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="attachments")
    segment = relationship("Segment", back_populates="attachments")
