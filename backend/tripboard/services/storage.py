"""
Upload storage on the local filesystem.

Files live under settings.UPLOAD_DIR and are referenced in the database by
their public path (``/uploads/<subdir>/<name>``). Removal is advisory: errors
are logged and never raised.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import UploadFile
from tripboard.core.config import settings
from tripboard.core.exceptions import ValidationError
import logging
import os
import time
import uuid

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


@dataclass
class FileMeta:
    """An already-stored file, ready to be recorded as an attachment."""
    path: str
    original_name: str
    mime_type: Optional[str] = None
    size: Optional[int] = None


def resolve_upload_path(public_path: str) -> str:
    """Map a public ``/uploads/...`` path to its location on disk."""
    relative = public_path.lstrip("/")
    prefix = PUBLIC_PREFIX.lstrip("/") + "/"
    if relative.startswith(prefix):
        relative = relative[len(prefix):]
    return os.path.join(settings.UPLOAD_DIR, relative)


async def save_upload(
    upload: UploadFile,
    subdir: str,
    max_size: int,
    default_extension: str = ""
) -> FileMeta:
    """Write an uploaded file under UPLOAD_DIR/<subdir> with a unique name."""
    content = await upload.read()
    if len(content) > max_size:
        raise ValidationError(
            f"File exceeds maximum size of {max_size // (1024 * 1024)}MB",
            details={"size": len(content), "max_size": max_size}
        )

    target_dir = os.path.join(settings.UPLOAD_DIR, subdir)
    os.makedirs(target_dir, exist_ok=True)

    file_ext = os.path.splitext(upload.filename or "")[1] or default_extension
    unique_filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex}{file_ext}"
    with open(os.path.join(target_dir, unique_filename), "wb") as buffer:
        buffer.write(content)

    return FileMeta(
        path=f"{PUBLIC_PREFIX}/{subdir}/{unique_filename}",
        original_name=upload.filename or unique_filename,
        mime_type=upload.content_type,
        size=len(content),
    )


def remove_file_if_exists(public_path: Optional[str]) -> bool:
    """Best-effort unlink. Returns True when a file was removed."""
    if not public_path:
        return False
    file_path = resolve_upload_path(public_path)
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            return True
    except OSError as e:
        logger.warning(f"Could not remove upload {file_path}: {e}")
    return False
