"""
Trip sharing: list, grant and revoke collaborator access.
"""
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from tripboard.core.exceptions import NotFoundError, ValidationError
from tripboard.models.trip import TripShare, TripPermission
from tripboard.models.user import User, UserRole
from tripboard.services.permission_service import assert_trip_permission
import logging

logger = logging.getLogger(__name__)


def list_shares(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    db: Session
) -> List[TripShare]:
    """List collaborators of a trip (owner only)."""
    assert_trip_permission(trip_id, user_id, user_role, TripPermission.OWNER, db)

    return db.query(TripShare).options(joinedload(TripShare.user)).filter(
        TripShare.trip_id == trip_id
    ).order_by(TripShare.created_at, TripShare.id).all()


def _find_target_user(
    target_user_id: Optional[int],
    target_email: Optional[str],
    db: Session
) -> User:
    if target_user_id is not None:
        user = db.query(User).filter(User.id == target_user_id).first()
    else:
        user = db.query(User).filter(User.email == target_email.strip().lower()).first()

    if not user:
        raise NotFoundError("User not found")
    return user


def add_share(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    permission: TripPermission,
    db: Session,
    target_user_id: Optional[int] = None,
    target_email: Optional[str] = None
) -> TripShare:
    """
    Grant view or edit access on a trip.

    Re-sharing with the same user overwrites the permission of the existing
    row, so there is at most one share per (trip, user).
    """
    trip, _ = assert_trip_permission(trip_id, user_id, user_role, TripPermission.OWNER, db)

    if (target_user_id is None) == (target_email is None):
        raise ValidationError("Provide exactly one of user_id or email")

    if permission == TripPermission.OWNER:
        raise ValidationError("Owner permission cannot be granted through sharing")

    target = _find_target_user(target_user_id, target_email, db)

    if target.id == trip.user_id:
        raise ValidationError("User already owns this trip")

    share = db.query(TripShare).filter(
        TripShare.trip_id == trip_id,
        TripShare.user_id == target.id
    ).first()

    if share:
        share.permission = permission
    else:
        share = TripShare(trip_id=trip_id, user_id=target.id, permission=permission)
        db.add(share)

    db.commit()
    db.refresh(share)

    logger.info(f"Trip {trip_id} shared with user {target.id} ({permission.value})")
    return share


def remove_share(
    trip_id: int,
    share_id: int,
    user_id: int,
    user_role: UserRole,
    db: Session
) -> None:
    """Revoke a share. Shares of other trips are reported as missing."""
    assert_trip_permission(trip_id, user_id, user_role, TripPermission.OWNER, db)

    share = db.query(TripShare).filter(
        TripShare.id == share_id,
        TripShare.trip_id == trip_id
    ).first()
    if not share:
        raise NotFoundError("Share not found")

    db.delete(share)
    db.commit()

    logger.info(f"Share {share_id} removed from trip {trip_id}")
