"""
Tests for trip permission resolution.
"""
import itertools

import pytest

from conftest import make_trip, make_user, share_trip
from tripboard.core.exceptions import ForbiddenError, NotFoundError
from tripboard.models import TripPermission, UserRole
from tripboard.services.permission_service import (
    PERMISSION_RANK, assert_trip_permission, resolve_permission, satisfies
)


def test_admin_is_owner_everywhere(db, trip, admin):
    """Admins get owner access without any share."""
    assert resolve_permission(trip, admin.id, UserRole.ADMIN, db) == TripPermission.OWNER


def test_admin_override_ignores_shares(db, trip, admin):
    """A view share on an admin does not lower the admin override."""
    share_trip(db, trip, admin, TripPermission.VIEW)
    assert resolve_permission(trip, admin.id, UserRole.ADMIN, db) == TripPermission.OWNER


def test_owner_is_owner(db, trip, owner):
    assert resolve_permission(trip, owner.id, UserRole.MEMBER, db) == TripPermission.OWNER


@pytest.mark.parametrize("permission", [TripPermission.VIEW, TripPermission.EDIT])
def test_shared_user_gets_share_permission(db, trip, friend, permission):
    share_trip(db, trip, friend, permission)
    assert resolve_permission(trip, friend.id, UserRole.MEMBER, db) == permission


def test_share_on_other_trip_grants_nothing(db, trip, owner, friend):
    other_trip = make_trip(db, owner, title="Porto")
    share_trip(db, other_trip, friend, TripPermission.EDIT)
    assert resolve_permission(trip, friend.id, UserRole.MEMBER, db) is None


def test_stranger_has_no_access(db, trip, stranger):
    assert resolve_permission(trip, stranger.id, UserRole.MEMBER, db) is None


def test_satisfies_follows_rank_order():
    assert satisfies(TripPermission.VIEW, TripPermission.VIEW)
    assert satisfies(TripPermission.VIEW, TripPermission.OWNER)
    assert satisfies(TripPermission.EDIT, TripPermission.EDIT)
    assert not satisfies(TripPermission.EDIT, TripPermission.VIEW)
    assert not satisfies(TripPermission.OWNER, TripPermission.EDIT)
    assert not satisfies(TripPermission.VIEW, None)


def test_satisfies_is_monotonic():
    """If a level satisfies a requirement, it satisfies every weaker requirement too."""
    levels = list(TripPermission)
    for required, actual, weaker in itertools.product(levels, levels, levels):
        if satisfies(required, actual) and PERMISSION_RANK[weaker] <= PERMISSION_RANK[required]:
            assert satisfies(weaker, actual)


def test_assert_returns_trip_and_permission(db, trip, friend):
    share_trip(db, trip, friend, TripPermission.EDIT)
    loaded, permission = assert_trip_permission(trip.id, friend.id, UserRole.MEMBER, TripPermission.EDIT, db)
    assert loaded.id == trip.id
    assert permission == TripPermission.EDIT


def test_assert_missing_trip_is_not_found(db, owner):
    with pytest.raises(NotFoundError):
        assert_trip_permission(9999, owner.id, UserRole.MEMBER, TripPermission.VIEW, db)


def test_assert_no_access_is_not_found(db, trip, stranger):
    """No access at all must look exactly like a missing trip."""
    with pytest.raises(NotFoundError) as exc_info:
        assert_trip_permission(trip.id, stranger.id, UserRole.MEMBER, TripPermission.VIEW, db)
    assert exc_info.value.message == "Trip not found"


def test_assert_insufficient_access_is_forbidden(db, trip, friend):
    share_trip(db, trip, friend, TripPermission.VIEW)
    with pytest.raises(ForbiddenError):
        assert_trip_permission(trip.id, friend.id, UserRole.MEMBER, TripPermission.EDIT, db)


def test_edit_share_cannot_act_as_owner(db, trip, friend):
    share_trip(db, trip, friend, TripPermission.EDIT)
    with pytest.raises(ForbiddenError):
        assert_trip_permission(trip.id, friend.id, UserRole.MEMBER, TripPermission.OWNER, db)


def test_each_identity_hits_exactly_one_branch(db, owner):
    """Admin, owner, shared user and stranger resolve to owner/owner/share/None."""
    trip = make_trip(db, owner)
    viewer = make_user(db, "viewer@example.com")
    outsider = make_user(db, "outsider@example.com")
    admin = make_user(db, "root@example.com", role=UserRole.ADMIN)
    share_trip(db, trip, viewer, TripPermission.VIEW)

    assert resolve_permission(trip, admin.id, admin.role, db) == TripPermission.OWNER
    assert resolve_permission(trip, owner.id, owner.role, db) == TripPermission.OWNER
    assert resolve_permission(trip, viewer.id, viewer.role, db) == TripPermission.VIEW
    assert resolve_permission(trip, outsider.id, outsider.role, db) is None
