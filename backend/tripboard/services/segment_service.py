"""
Segment service - segment CRUD, on-demand flight enrichment and cascading delete.
"""
from sqlalchemy.orm import Session
from typing import Any, Dict
from tripboard.core.exceptions import NotFoundError
from tripboard.core.utils import to_naive_utc
from tripboard.models.attachment import Attachment
from tripboard.models.segment import Segment
from tripboard.models.trip import TripPermission
from tripboard.models.user import UserRole
from tripboard.schemas.segment import SegmentCreate, SegmentUpdate
from tripboard.schemas.trip import TripDetailResponse
from tripboard.services.flight_service import enrich_segment, should_enrich
from tripboard.services.permission_service import assert_trip_permission
from tripboard.services.storage import remove_file_if_exists
from tripboard.services.trip_service import build_trip_detail
import logging

logger = logging.getLogger(__name__)

# Fields that are NOT NULL in the table; an explicit null in an update is ignored
REQUIRED_FIELDS = ("type", "title", "start_time", "sort_order")


def get_segment_or_404(segment_id: int, db: Session) -> Segment:
    segment = db.query(Segment).filter(Segment.id == segment_id).first()
    if not segment:
        raise NotFoundError("Segment not found")
    return segment


def _enrich_quietly(segment: Segment, db: Session) -> None:
    """Run flight enrichment without ever failing the caller's write."""
    if not should_enrich(segment.transport_mode, segment.flight_number, segment.start_time):
        return
    try:
        enrich_segment(
            segment.id,
            segment.transport_mode,
            segment.flight_number,
            segment.start_time,
            db
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Flight enrichment crashed for segment {segment.id}: {e}", exc_info=True)


def _normalize_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("start_time", "end_time"):
        if key in data:
            data[key] = to_naive_utc(data[key])
    return data


def create_segment(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    segment_data: SegmentCreate,
    db: Session
) -> TripDetailResponse:
    """Add a segment to a trip (edit access) and return the fresh trip aggregate."""
    _, permission = assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    segment = Segment(trip_id=trip_id, **_normalize_fields(segment_data.model_dump()))
    db.add(segment)
    db.commit()
    db.refresh(segment)

    logger.info(f"Segment {segment.id} created on trip {trip_id}")
    _enrich_quietly(segment, db)

    return build_trip_detail(trip_id, permission, db)


def update_segment(
    segment_id: int,
    user_id: int,
    user_role: UserRole,
    segment_data: SegmentUpdate,
    db: Session
) -> TripDetailResponse:
    """Update the fields that were sent (edit access) and re-enrich flights."""
    segment = get_segment_or_404(segment_id, db)
    trip_id = segment.trip_id
    _, permission = assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    update_fields = _normalize_fields(segment_data.model_dump(exclude_unset=True))
    for field, value in update_fields.items():
        if field in REQUIRED_FIELDS and value is None:
            continue
        setattr(segment, field, value)

    db.commit()
    db.refresh(segment)

    _enrich_quietly(segment, db)

    return build_trip_detail(trip_id, permission, db)


def enrich_now(
    segment_id: int,
    user_id: int,
    user_role: UserRole,
    db: Session
) -> TripDetailResponse:
    """Refresh flight data for one segment immediately (edit access)."""
    segment = get_segment_or_404(segment_id, db)
    trip_id = segment.trip_id
    _, permission = assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    _enrich_quietly(segment, db)

    return build_trip_detail(trip_id, permission, db)


def delete_segment(segment_id: int, user_id: int, user_role: UserRole, db: Session) -> None:
    """
    Delete a segment and its attachments (edit access).

    Files are unlinked best-effort before the rows go; the attachment rows and
    the segment row are removed in one transaction.
    """
    segment = get_segment_or_404(segment_id, db)
    assert_trip_permission(segment.trip_id, user_id, user_role, TripPermission.EDIT, db)

    attachments = db.query(Attachment).filter(Attachment.segment_id == segment_id).all()
    for attachment in attachments:
        remove_file_if_exists(attachment.path)

    try:
        db.query(Attachment).filter(Attachment.segment_id == segment_id).delete(synchronize_session="fetch")
        db.query(Segment).filter(Segment.id == segment_id).delete(synchronize_session="fetch")
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to delete segment {segment_id}; transaction rolled back", exc_info=True)
        raise

    logger.info(f"Segment {segment_id} deleted with {len(attachments)} attachments")
