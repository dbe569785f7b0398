"""
Attachment lifecycle for files owned by a trip or a segment.
"""
from sqlalchemy.orm import Session
from dataclasses import dataclass
from typing import Optional
from tripboard.core.exceptions import NotFoundError, ValidationError
from tripboard.models.attachment import Attachment
from tripboard.models.segment import Segment
from tripboard.models.trip import TripPermission
from tripboard.models.user import UserRole
from tripboard.services.permission_service import assert_trip_permission
from tripboard.services.storage import FileMeta, remove_file_if_exists
import logging

logger = logging.getLogger(__name__)


@dataclass
class AttachmentOwner:
    """Either a trip or a segment, never both."""
    trip_id: Optional[int] = None
    segment_id: Optional[int] = None

    def __post_init__(self):
        if (self.trip_id is None) == (self.segment_id is None):
            raise ValidationError("Attachment owner must be exactly one of trip or segment")

    def owns(self, attachment: Attachment) -> bool:
        if self.segment_id is not None:
            return attachment.segment_id == self.segment_id
        return attachment.trip_id == self.trip_id


def _owning_trip_id(owner: AttachmentOwner, db: Session) -> int:
    if owner.trip_id is not None:
        return owner.trip_id
    segment = db.query(Segment).filter(Segment.id == owner.segment_id).first()
    if not segment:
        raise NotFoundError("Segment not found")
    return segment.trip_id


def add_attachment(
    owner: AttachmentOwner,
    file_meta: FileMeta,
    user_id: int,
    user_role: UserRole,
    db: Session
) -> Attachment:
    """Record an already-stored file as an attachment (edit access)."""
    trip_id = _owning_trip_id(owner, db)
    assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    attachment = Attachment(
        trip_id=owner.trip_id,
        segment_id=owner.segment_id,
        path=file_meta.path,
        original_name=file_meta.original_name,
        mime_type=file_meta.mime_type,
        size=file_meta.size,
    )
    db.add(attachment)
    db.commit()
    db.refresh(attachment)

    logger.info(f"Attachment {attachment.id} added to {owner}")
    return attachment


def delete_attachment(
    owner: AttachmentOwner,
    attachment_id: int,
    user_id: int,
    user_role: UserRole,
    db: Session
) -> None:
    """Delete an attachment of the given owner (edit access) and unlink its file."""
    trip_id = _owning_trip_id(owner, db)
    assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    attachment = db.query(Attachment).filter(Attachment.id == attachment_id).first()
    if not attachment or not owner.owns(attachment):
        raise NotFoundError("Attachment not found")

    remove_file_if_exists(attachment.path)

    db.delete(attachment)
    db.commit()

    logger.info(f"Attachment {attachment_id} removed from {owner}")
