"""
Shared pytest fixtures for Tripboard tests.

Every test gets its own in-memory SQLite database. The flight data provider
is never called for real: tests install a stub through `flight_lookup`.
"""
import os
import tempfile

# Configure the environment before tripboard.core.config builds its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="tripboard-uploads-")
os.environ["FLIGHT_AUTO_SYNC_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tripboard.core.config import settings
from tripboard.core.security import create_access_token
from tripboard.db.base import Base
from tripboard.db.session import enable_sqlite_foreign_keys, get_db
from tripboard.main import app
from tripboard.models import (
    Attachment, Segment, SegmentType, TransportMode, Trip, TripPermission, TripShare,
    User, UserRole, UserStatus
)
from tripboard.services import flight_client


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point uploads at a per-test directory."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def client(session_factory, upload_dir):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ─────────────────────────── FACTORIES ───────────────────────────

def make_user(db, email: str, role: UserRole = UserRole.MEMBER, status: UserStatus = UserStatus.ACTIVE) -> User:
    user = User(email=email, hashed_password="not-a-real-hash", role=role, status=status)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_trip(db, owner: User, title: str = "Lisbon", **fields) -> Trip:
    trip = Trip(
        user_id=owner.id,
        title=title,
        start_date=fields.pop("start_date", date(2026, 11, 1)),
        end_date=fields.pop("end_date", date(2026, 11, 8)),
        **fields
    )
    db.add(trip)
    db.commit()
    db.refresh(trip)
    return trip


def make_segment(db, trip: Trip, title: str = "Museum", **fields) -> Segment:
    segment = Segment(
        trip_id=trip.id,
        type=fields.pop("type", SegmentType.ACTIVITY),
        title=title,
        start_time=fields.pop("start_time", datetime(2026, 11, 2, 10, 0)),
        **fields
    )
    db.add(segment)
    db.commit()
    db.refresh(segment)
    return segment


def make_flight_segment(db, trip: Trip, **fields) -> Segment:
    fields.setdefault("type", SegmentType.TRANSPORT)
    fields.setdefault("transport_mode", TransportMode.FLIGHT)
    fields.setdefault("flight_number", "TP1234")
    return make_segment(db, trip, title=fields.pop("title", "Flight to Lisbon"), **fields)


def make_attachment(db, path: str, trip: Optional[Trip] = None, segment: Optional[Segment] = None) -> Attachment:
    attachment = Attachment(
        trip_id=trip.id if trip else None,
        segment_id=segment.id if segment else None,
        path=path,
        original_name=os.path.basename(path),
        mime_type="application/pdf",
        size=3,
    )
    db.add(attachment)
    db.commit()
    db.refresh(attachment)
    return attachment


def share_trip(db, trip: Trip, user: User, permission: TripPermission) -> TripShare:
    share = TripShare(trip_id=trip.id, user_id=user.id, permission=permission)
    db.add(share)
    db.commit()
    db.refresh(share)
    return share


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(db):
    return make_user(db, "owner@example.com")


@pytest.fixture
def friend(db):
    return make_user(db, "friend@example.com")


@pytest.fixture
def stranger(db):
    return make_user(db, "stranger@example.com")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def trip(db, owner):
    return make_trip(db, owner)


# ─────────────────────────── FLIGHT PROVIDER STUB ───────────────────────────

SAMPLE_FLIGHT = {
    "flight_status": "Delayed",
    "flight_airline": "TAP Air Portugal",
    "flight_departure": {"airport": {"iata": "JFK"}, "terminal": "1", "gate": "B7"},
    "flight_arrival": {"airport": {"iata": "LIS"}, "terminal": "2", "gate": "12", "baggageBelt": "5"},
    "flight_delay_minutes": 35,
    "flight_gate_departure": "B7",
    "flight_gate_arrival": "12",
    "flight_terminal_dep": "1",
    "flight_terminal_arr": "2",
    "flight_baggage": "5",
    "flight_meta": {"number": "TP 1234", "status": "Delayed"},
}


class FlightLookupStub:
    """Records calls and answers with a fixed result, None, or an exception."""

    def __init__(self):
        self.calls = []
        self.result: Optional[Dict[str, Any]] = dict(SAMPLE_FLIGHT)
        self.error: Optional[Exception] = None

    def __call__(self, flight_number, flight_date, db):
        self.calls.append((flight_number, flight_date))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def flight_lookup(monkeypatch) -> FlightLookupStub:
    stub = FlightLookupStub()
    monkeypatch.setattr(flight_client, "fetch_by_number_and_date", stub)
    return stub


@pytest.fixture
def write_upload(upload_dir) -> Callable[[str], str]:
    """Create a file under the upload dir and return its public path."""
    def _write(name: str, subdir: str = "attachments") -> str:
        folder = upload_dir / subdir
        folder.mkdir(parents=True, exist_ok=True)
        (folder / name).write_bytes(b"pdf")
        return f"/uploads/{subdir}/{name}"
    return _write
