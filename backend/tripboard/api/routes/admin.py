"""
Admin routes: account approval, roles and the flight data API key.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tripboard.core.config import settings
from tripboard.core.exceptions import NotFoundError
from tripboard.db.session import get_db
from tripboard.models.user import User
from tripboard.schemas.flight import FlightApiKeyStatus, FlightApiKeyUpdate
from tripboard.schemas.user import UserResponse, UserStatusUpdate, UserRoleUpdate
from tripboard.services.flight_client import API_KEY_SETTING, get_api_key
from tripboard.services.settings_service import set_setting, delete_setting
from tripboard.api.dependencies import require_admin
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_user_or_404(user_id: int, db: Session) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all accounts, oldest first."""
    return db.query(User).order_by(User.created_at, User.id).all()


@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Approve or reject an account."""
    user = _get_user_or_404(user_id, db)
    user.status = payload.status
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} set status of user {user_id} to {payload.status.value}")
    return user


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    payload: UserRoleUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Change an account's global role."""
    user = _get_user_or_404(user_id, db)
    user.role = payload.role
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} set role of user {user_id} to {payload.role.value}")
    return user


@router.get("/flight-api-key", response_model=FlightApiKeyStatus)
async def get_flight_api_key_status(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Report whether a flight API key is configured, and where it comes from."""
    api_key, source = get_api_key(db)
    return FlightApiKeyStatus(
        has_key=bool(api_key),
        source=source,
        enabled=settings.FLIGHT_AUTO_SYNC_ENABLED,
    )


@router.put("/flight-api-key", response_model=FlightApiKeyStatus)
async def update_flight_api_key(
    payload: FlightApiKeyUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Store the flight API key in the database; an empty key removes it."""
    if payload.api_key and payload.api_key.strip():
        set_setting(API_KEY_SETTING, payload.api_key.strip(), db)
        logger.info(f"Admin {admin.id} stored a flight API key")
    else:
        delete_setting(API_KEY_SETTING, db)
        logger.info(f"Admin {admin.id} removed the stored flight API key")

    api_key, source = get_api_key(db)
    return FlightApiKeyStatus(
        has_key=bool(api_key),
        source=source,
        enabled=settings.FLIGHT_AUTO_SYNC_ENABLED,
    )
