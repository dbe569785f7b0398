"""
Trip management routes: trips, planning, cover image, shares and trip attachments.
"""
from fastapi import APIRouter, Depends, status, UploadFile, File
from sqlalchemy.orm import Session
from typing import List
from tripboard.core.config import settings
from tripboard.core.exceptions import ValidationError
from tripboard.db.session import get_db
from tripboard.models.user import User
from tripboard.models.trip import TripPermission
from tripboard.schemas.attachment import AttachmentResponse
from tripboard.schemas.segment import SegmentCreate
from tripboard.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripDetailResponse,
    PlanningDocument, TripShareCreate, TripShareResponse
)
from tripboard.services import trip_service, share_service, segment_service
from tripboard.services.attachment_service import AttachmentOwner, add_attachment, delete_attachment
from tripboard.services.storage import save_upload, remove_file_if_exists
from tripboard.api.dependencies import get_current_user

router = APIRouter(prefix="/trips", tags=["trips"])


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List trips owned by or shared with the current user."""
    return trip_service.list_trips(current_user.id, current_user.role, db)


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip owned by the current user."""
    trip = trip_service.create_trip(current_user.id, trip_data, db)
    return TripResponse.model_validate(trip).model_copy(update={"access_permission": TripPermission.OWNER})


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip with segments and attachments."""
    return trip_service.get_trip(trip_id, current_user.id, current_user.role, db)


@router.put("/{trip_id}", response_model=TripDetailResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update trip details."""
    return trip_service.update_trip(trip_id, current_user.id, current_user.role, trip_data, db)


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a trip with everything attached to it."""
    trip_service.delete_trip(trip_id, current_user.id, current_user.role, db)
    return {"success": True}


@router.get("/{trip_id}/planning", response_model=PlanningDocument)
async def get_planning(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the trip planning document."""
    planning = trip_service.get_planning(trip_id, current_user.id, current_user.role, db)
    return {"planning": planning}


@router.put("/{trip_id}/planning", response_model=PlanningDocument)
async def update_planning(
    trip_id: int,
    payload: PlanningDocument,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace the trip planning document."""
    planning = trip_service.update_planning(trip_id, current_user.id, current_user.role, payload.planning, db)
    return {"planning": planning}


@router.post("/{trip_id}/image", response_model=TripDetailResponse)
async def upload_trip_image(
    trip_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Upload a cover image for the trip."""
    if not (file.content_type or "").startswith("image/"):
        raise ValidationError("Only image uploads allowed")

    file_meta = await save_upload(file, "trips", settings.MAX_IMAGE_SIZE, default_extension=".jpg")
    try:
        return trip_service.update_trip_image(trip_id, current_user.id, current_user.role, file_meta.path, db)
    except Exception:
        remove_file_if_exists(file_meta.path)
        raise


@router.get("/{trip_id}/shares", response_model=List[TripShareResponse])
async def list_shares(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List collaborators of a trip."""
    return share_service.list_shares(trip_id, current_user.id, current_user.role, db)


@router.post("/{trip_id}/shares", response_model=TripShareResponse)
async def add_share(
    trip_id: int,
    payload: TripShareCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Share a trip with a user, or change that user's permission."""
    return share_service.add_share(
        trip_id,
        current_user.id,
        current_user.role,
        payload.permission,
        db,
        target_user_id=payload.user_id,
        target_email=payload.email,
    )


@router.delete("/{trip_id}/shares/{share_id}")
async def remove_share(
    trip_id: int,
    share_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Revoke a collaborator's access."""
    share_service.remove_share(trip_id, share_id, current_user.id, current_user.role, db)
    return {"success": True}


@router.post("/{trip_id}/segments", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
def create_segment(
    trip_id: int,
    segment_data: SegmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a segment to the trip; flight segments are enriched right away."""
    return segment_service.create_segment(trip_id, current_user.id, current_user.role, segment_data, db)


@router.post("/{trip_id}/attachments", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_trip_attachment(
    trip_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Attach a file to the trip."""
    file_meta = await save_upload(file, "attachments", settings.MAX_ATTACHMENT_SIZE)
    try:
        return add_attachment(AttachmentOwner(trip_id=trip_id), file_meta, current_user.id, current_user.role, db)
    except Exception:
        remove_file_if_exists(file_meta.path)
        raise


@router.delete("/{trip_id}/attachments/{attachment_id}")
async def delete_trip_attachment(
    trip_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a trip attachment."""
    delete_attachment(AttachmentOwner(trip_id=trip_id), attachment_id, current_user.id, current_user.role, db)
    return {"success": True}
