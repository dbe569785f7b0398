"""
Trip service - trip CRUD, planning document, cover image and cascading delete.
"""
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from typing import Any, Dict, List
from tripboard.core.exceptions import ValidationError
from tripboard.models.attachment import Attachment
from tripboard.models.segment import Segment
from tripboard.models.trip import Trip, TripShare, TripPermission
from tripboard.models.user import UserRole
from tripboard.schemas.trip import TripCreate, TripUpdate, TripResponse, TripDetailResponse
from tripboard.services.permission_service import assert_trip_permission
from tripboard.services.storage import remove_file_if_exists
import logging

logger = logging.getLogger(__name__)


def _load_trip_details(trip_id: int, db: Session) -> Trip:
    return db.query(Trip).options(
        selectinload(Trip.segments).selectinload(Segment.attachments),
        selectinload(Trip.attachments),
    ).filter(Trip.id == trip_id).populate_existing().one()


def build_trip_detail(trip_id: int, permission: TripPermission, db: Session) -> TripDetailResponse:
    """Trip aggregate with segments, attachments and the caller's permission."""
    trip = _load_trip_details(trip_id, db)
    detail = TripDetailResponse.model_validate(trip)
    detail.access_permission = permission
    return detail


def list_trips(user_id: int, user_role: UserRole, db: Session) -> List[TripResponse]:
    """
    List trips visible to the caller, ordered by start date.

    Admins see every trip; everyone else sees trips they own or that were
    shared with them.
    """
    if user_role == UserRole.ADMIN:
        trips = db.query(Trip).order_by(Trip.start_date, Trip.id).all()
        return [
            TripResponse.model_validate(trip).model_copy(update={"access_permission": TripPermission.OWNER})
            for trip in trips
        ]

    shares = {
        share.trip_id: share.permission
        for share in db.query(TripShare).filter(TripShare.user_id == user_id).all()
    }
    trips = db.query(Trip).filter(
        or_(Trip.user_id == user_id, Trip.id.in_(list(shares.keys())))
    ).order_by(Trip.start_date, Trip.id).all()

    result = []
    for trip in trips:
        permission = TripPermission.OWNER if trip.user_id == user_id else shares.get(trip.id)
        result.append(TripResponse.model_validate(trip).model_copy(update={"access_permission": permission}))
    return result


def get_trip(trip_id: int, user_id: int, user_role: UserRole, db: Session) -> TripDetailResponse:
    """Get a trip aggregate (view access)."""
    _, permission = assert_trip_permission(trip_id, user_id, user_role, TripPermission.VIEW, db)
    return build_trip_detail(trip_id, permission, db)


def create_trip(user_id: int, trip_data: TripCreate, db: Session) -> Trip:
    """Create a trip owned by the caller."""
    if trip_data.end_date < trip_data.start_date:
        raise ValidationError("end_date cannot be before start_date")

    trip = Trip(
        user_id=user_id,
        title=trip_data.title,
        main_location=trip_data.main_location,
        start_date=trip_data.start_date,
        end_date=trip_data.end_date,
        notes=trip_data.notes,
    )
    db.add(trip)
    db.commit()
    db.refresh(trip)

    logger.info(f"Trip {trip.id} created by user {user_id}")
    return trip


def update_trip(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    trip_data: TripUpdate,
    db: Session
) -> TripDetailResponse:
    """Update trip fields that were sent (edit access)."""
    trip, permission = assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    update_fields = trip_data.model_dump(exclude_unset=True)
    start_date = update_fields.get("start_date")
    end_date = update_fields.get("end_date")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date cannot be before start_date")

    for field, value in update_fields.items():
        if field in ("title", "start_date", "end_date") and value is None:
            continue
        setattr(trip, field, value)

    db.commit()
    return build_trip_detail(trip_id, permission, db)


def get_planning(trip_id: int, user_id: int, user_role: UserRole, db: Session) -> Dict[str, Any]:
    """Get the opaque planning document (view access)."""
    trip, _ = assert_trip_permission(trip_id, user_id, user_role, TripPermission.VIEW, db)
    return trip.planning or {}


def update_planning(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    planning: Dict[str, Any],
    db: Session
) -> Dict[str, Any]:
    """Replace the planning document (edit access)."""
    trip, _ = assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)
    trip.planning = planning
    db.commit()
    db.refresh(trip)
    return trip.planning or {}


def update_trip_image(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    image_path: str,
    db: Session
) -> TripDetailResponse:
    """Point the trip at a new cover image and drop the old file."""
    trip, permission = assert_trip_permission(trip_id, user_id, user_role, TripPermission.EDIT, db)

    previous = trip.image_path
    trip.image_path = image_path
    db.commit()

    if previous and previous != image_path:
        remove_file_if_exists(previous)

    return build_trip_detail(trip_id, permission, db)


def delete_trip(trip_id: int, user_id: int, user_role: UserRole, db: Session) -> None:
    """
    Delete a trip with its segments, attachments and shares (owner only).

    Backing files are unlinked first, best-effort. The rows are then removed
    in one transaction, children before parents.
    """
    trip, _ = assert_trip_permission(trip_id, user_id, user_role, TripPermission.OWNER, db)

    segment_ids = [
        segment_id for (segment_id,) in db.query(Segment.id).filter(Segment.trip_id == trip_id).all()
    ]
    attachment_filter = Attachment.trip_id == trip_id
    if segment_ids:
        attachment_filter = or_(attachment_filter, Attachment.segment_id.in_(segment_ids))

    attachments = db.query(Attachment).filter(attachment_filter).all()
    for attachment in attachments:
        remove_file_if_exists(attachment.path)
    remove_file_if_exists(trip.image_path)

    try:
        db.query(Attachment).filter(attachment_filter).delete(synchronize_session="fetch")
        db.query(Segment).filter(Segment.trip_id == trip_id).delete(synchronize_session="fetch")
        db.query(TripShare).filter(TripShare.trip_id == trip_id).delete(synchronize_session="fetch")
        db.query(Trip).filter(Trip.id == trip_id).delete(synchronize_session="fetch")
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to delete trip {trip_id}; transaction rolled back", exc_info=True)
        raise

    logger.info(
        f"Trip {trip_id} deleted with {len(segment_ids)} segments and {len(attachments)} attachments"
    )
