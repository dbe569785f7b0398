"""
Segment routes: update, delete, flight refresh and segment attachments.
"""
from fastapi import APIRouter, Depends, status, UploadFile, File
from sqlalchemy.orm import Session
from tripboard.core.config import settings
from tripboard.db.session import get_db
from tripboard.models.user import User
from tripboard.schemas.attachment import AttachmentResponse
from tripboard.schemas.segment import SegmentUpdate
from tripboard.schemas.trip import TripDetailResponse
from tripboard.services import segment_service
from tripboard.services.attachment_service import AttachmentOwner, add_attachment, delete_attachment
from tripboard.services.storage import save_upload, remove_file_if_exists
from tripboard.api.dependencies import get_current_user

router = APIRouter(prefix="/segments", tags=["segments"])


@router.put("/{segment_id}", response_model=TripDetailResponse)
def update_segment(
    segment_id: int,
    segment_data: SegmentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a segment; flight segments are re-enriched."""
    return segment_service.update_segment(segment_id, current_user.id, current_user.role, segment_data, db)


@router.delete("/{segment_id}")
async def delete_segment(
    segment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a segment with its attachments."""
    segment_service.delete_segment(segment_id, current_user.id, current_user.role, db)
    return {"success": True}


@router.post("/{segment_id}/enrich", response_model=TripDetailResponse)
def enrich_segment_now(
    segment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Refresh live flight data for a segment now."""
    return segment_service.enrich_now(segment_id, current_user.id, current_user.role, db)


@router.post("/{segment_id}/attachments", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_segment_attachment(
    segment_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Attach a file to a segment."""
    file_meta = await save_upload(file, "attachments", settings.MAX_ATTACHMENT_SIZE)
    try:
        return add_attachment(AttachmentOwner(segment_id=segment_id), file_meta, current_user.id, current_user.role, db)
    except Exception:
        remove_file_if_exists(file_meta.path)
        raise


@router.delete("/{segment_id}/attachments/{attachment_id}")
async def delete_segment_attachment(
    segment_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a segment attachment."""
    delete_attachment(AttachmentOwner(segment_id=segment_id), attachment_id, current_user.id, current_user.role, db)
    return {"success": True}
