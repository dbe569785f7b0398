"""
Pydantic schemas for Attachment entity.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AttachmentResponse(BaseModel):
    """Schema for attachment response."""
    id: int
    trip_id: Optional[int] = None
    segment_id: Optional[int] = None
    path: str
    original_name: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
