"""
Trip permission resolution.

Effective permission is decided in priority order: admin override, trip
ownership, then the caller's TripShare row. No access at all is reported as
"not found" so trip existence never leaks to outsiders.
"""
from sqlalchemy.orm import Session
from typing import Optional, Tuple
from tripboard.core.exceptions import NotFoundError, ForbiddenError
from tripboard.models.trip import Trip, TripShare, TripPermission
from tripboard.models.user import UserRole

PERMISSION_RANK = {
    TripPermission.VIEW: 1,
    TripPermission.EDIT: 2,
    TripPermission.OWNER: 3,
}


def satisfies(required: TripPermission, actual: Optional[TripPermission]) -> bool:
    """True when `actual` is at least as strong as `required`."""
    if actual is None:
        return False
    return PERMISSION_RANK[actual] >= PERMISSION_RANK[required]


def resolve_permission(
    trip: Trip,
    user_id: int,
    user_role: UserRole,
    db: Session
) -> Optional[TripPermission]:
    """Return the caller's effective permission on `trip`, or None for no access."""
    if user_role == UserRole.ADMIN:
        return TripPermission.OWNER

    if trip.user_id == user_id:
        return TripPermission.OWNER

    share = db.query(TripShare).filter(
        TripShare.trip_id == trip.id,
        TripShare.user_id == user_id
    ).first()

    return share.permission if share else None


def assert_trip_permission(
    trip_id: int,
    user_id: int,
    user_role: UserRole,
    required: TripPermission,
    db: Session
) -> Tuple[Trip, TripPermission]:
    """
    Load a trip and check the caller holds at least `required` on it.

    For anything above view access the trip row is locked for the rest of the
    transaction, so the check and the caller's mutation see the same state.

    Raises:
        NotFoundError: trip is missing, or the caller has no access to it
        ForbiddenError: caller has access below `required`
    """
    query = db.query(Trip).filter(Trip.id == trip_id)
    if required != TripPermission.VIEW:
        query = query.with_for_update()
    trip = query.first()
    if not trip:
        raise NotFoundError("Trip not found")

    permission = resolve_permission(trip, user_id, user_role, db)
    if permission is None:
        raise NotFoundError("Trip not found")

    if not satisfies(required, permission):
        raise ForbiddenError("Not enough permissions for this trip")

    return trip, permission
