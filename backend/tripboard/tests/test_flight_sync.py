"""
Tests for the background flight sync.
"""
import asyncio
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from conftest import make_flight_segment, make_segment
from tripboard.core.config import settings
from tripboard.main import app
from tripboard.models import FlightFetchStatus, Segment, SegmentType, TransportMode
from tripboard.services import flight_client, flight_sync
from tripboard.services.flight_sync import FlightSyncScheduler, today_window

NOW = datetime(2026, 11, 1, 12, 0)


def synced_flight(db, trip, start_time, fetched_minutes_ago=None, **fields):
    fetched_at = NOW - timedelta(minutes=fetched_minutes_ago) if fetched_minutes_ago is not None else None
    return make_flight_segment(
        db, trip,
        start_time=start_time,
        flight_auto_sync=fields.pop("flight_auto_sync", True),
        flight_last_fetched_at=fetched_at,
        flight_last_fetch_status=FlightFetchStatus.OK if fetched_at else None,
        **fields
    )


def test_today_window():
    start, end = today_window(datetime(2026, 11, 1, 23, 59, 59))
    assert start == datetime(2026, 11, 1)
    assert end == datetime(2026, 11, 2)


def test_throttle_boundary(session_factory):
    scheduler = FlightSyncScheduler(session_factory, throttle_minutes=50)
    assert scheduler.is_throttled(NOW - timedelta(minutes=49, seconds=59), NOW)
    assert not scheduler.is_throttled(NOW - timedelta(minutes=50), NOW)
    assert not scheduler.is_throttled(None, NOW)


def test_tick_refreshes_stale_and_skips_recent(db, trip, session_factory, flight_lookup):
    recent = synced_flight(db, trip, datetime(2026, 11, 1, 18, 0), fetched_minutes_ago=10, flight_number="TP1")
    stale = synced_flight(db, trip, datetime(2026, 11, 1, 20, 0), fetched_minutes_ago=55, flight_number="TP2")

    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)

    assert stats == {"checked": 2, "enriched": 1, "skipped": 1, "failed": 0}
    assert flight_lookup.calls == [("TP2", datetime(2026, 11, 1).date())]

    db.expire_all()
    assert db.get(Segment, stale.id).flight_last_fetched_at == NOW
    assert db.get(Segment, stale.id).flight_status == "Delayed"
    assert db.get(Segment, recent.id).flight_last_fetched_at == NOW - timedelta(minutes=10)


def test_tick_only_looks_at_todays_auto_synced_flights(db, trip, session_factory, flight_lookup):
    synced_flight(db, trip, datetime(2026, 11, 1, 0, 0), flight_number="TODAY")
    synced_flight(db, trip, datetime(2026, 10, 31, 23, 59), flight_number="YESTERDAY")
    synced_flight(db, trip, datetime(2026, 11, 2, 0, 0), flight_number="TOMORROW")
    synced_flight(db, trip, datetime(2026, 11, 1, 9, 0), flight_number="MANUAL", flight_auto_sync=False)
    make_segment(
        db, trip,
        type=SegmentType.TRANSPORT,
        transport_mode=TransportMode.TRAIN,
        start_time=datetime(2026, 11, 1, 9, 0),
        flight_auto_sync=True,
    )

    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)

    assert stats["checked"] == 1
    assert [number for number, _ in flight_lookup.calls] == ["TODAY"]


def test_never_fetched_segment_is_not_throttled(db, trip, session_factory, flight_lookup):
    synced_flight(db, trip, datetime(2026, 11, 1, 15, 0))
    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)
    assert stats["enriched"] == 1


def test_provider_outcomes_keep_auto_sync(db, trip, session_factory, flight_lookup):
    segment = synced_flight(db, trip, datetime(2026, 11, 1, 15, 0), fetched_minutes_ago=120)
    flight_lookup.result = None

    FlightSyncScheduler(session_factory).run_once(now=NOW)

    db.expire_all()
    refreshed = db.get(Segment, segment.id)
    assert refreshed.flight_last_fetch_status == FlightFetchStatus.NOT_FOUND
    assert refreshed.flight_auto_sync is True


def test_one_failing_segment_does_not_stop_the_tick(db, trip, session_factory, flight_lookup, monkeypatch):
    broken = synced_flight(db, trip, datetime(2026, 11, 1, 8, 0), flight_number="BROKEN")
    healthy = synced_flight(db, trip, datetime(2026, 11, 1, 9, 0), flight_number="TP9")
    real_enrich = flight_sync.enrich_segment

    def flaky_enrich(segment_id, *args, **kwargs):
        if segment_id == broken.id:
            raise RuntimeError("lock wait timeout")
        return real_enrich(segment_id, *args, **kwargs)

    monkeypatch.setattr(flight_sync, "enrich_segment", flaky_enrich)

    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)

    assert stats == {"checked": 2, "enriched": 1, "skipped": 0, "failed": 1}
    db.expire_all()
    assert db.get(Segment, healthy.id).flight_last_fetch_status == FlightFetchStatus.OK


def test_segment_deleted_during_tick_is_skipped(db, trip, session_factory, flight_lookup, monkeypatch):
    first = synced_flight(db, trip, datetime(2026, 11, 1, 8, 0), flight_number="TP1")
    doomed = synced_flight(db, trip, datetime(2026, 11, 1, 9, 0), flight_number="TP2")
    last = synced_flight(db, trip, datetime(2026, 11, 1, 10, 0), flight_number="TP3")
    first_id, doomed_id, last_id = first.id, doomed.id, last.id

    def lookup_then_delete(flight_number, flight_date, session):
        if flight_number == "TP1":
            # Someone removes the next segment while the tick is running
            other = session_factory()
            other.query(Segment).filter(Segment.id == doomed_id).delete()
            other.commit()
            other.close()
        return flight_lookup(flight_number, flight_date, session)

    monkeypatch.setattr(flight_client, "fetch_by_number_and_date", lookup_then_delete)

    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)

    assert stats == {"checked": 3, "enriched": 2, "skipped": 1, "failed": 0}
    assert [number for number, _ in flight_lookup.calls] == ["TP1", "TP3"]
    db.expire_all()
    assert db.get(Segment, doomed_id) is None
    assert db.get(Segment, first_id).flight_last_fetch_status == FlightFetchStatus.OK
    assert db.get(Segment, last_id).flight_last_fetch_status == FlightFetchStatus.OK


def test_synced_segment_without_flight_number_counts_as_skipped(db, trip, session_factory, flight_lookup):
    synced_flight(db, trip, datetime(2026, 11, 1, 15, 0), fetched_minutes_ago=120, flight_number=None)

    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)

    assert stats == {"checked": 1, "enriched": 0, "skipped": 1, "failed": 0}
    assert flight_lookup.calls == []


def test_empty_tick(session_factory, flight_lookup):
    stats = FlightSyncScheduler(session_factory).run_once(now=NOW)
    assert stats == {"checked": 0, "enriched": 0, "skipped": 0, "failed": 0}


def test_start_and_stop(session_factory):
    scheduler = FlightSyncScheduler(session_factory, interval_seconds=0)
    ticks = []
    scheduler.run_once = lambda now=None: ticks.append(now) or {}

    async def run():
        scheduler.start()
        assert scheduler.is_running
        await asyncio.sleep(0.05)
        await scheduler.stop()

    asyncio.run(run())

    assert not scheduler.is_running
    assert len(ticks) >= 1


def test_start_twice_keeps_one_task(session_factory):
    scheduler = FlightSyncScheduler(session_factory, interval_seconds=3600)

    async def run():
        scheduler.start()
        first = scheduler._task
        scheduler.start()
        assert scheduler._task is first
        await scheduler.stop()

    asyncio.run(run())
    assert not scheduler.is_running


def test_stop_without_start(session_factory):
    asyncio.run(FlightSyncScheduler(session_factory).stop())


def test_lifespan_runs_scheduler_when_enabled(monkeypatch):
    monkeypatch.setattr(settings, "FLIGHT_AUTO_SYNC_ENABLED", True)

    with TestClient(app):
        scheduler = app.state.flight_sync
        assert scheduler.is_running

    assert not scheduler.is_running


def test_lifespan_skips_scheduler_when_disabled():
    with TestClient(app):
        assert app.state.flight_sync is None
