"""
Flight segment enrichment.

Each run records the outcome (ok / not_found / error) and rewrites the whole
set of flight columns, never a subset:
- ok: every column is replaced from the provider record.
- not_found: every column is cleared.
- error: columns are cleared unless they already describe the same flight
  number and date, in which case the last good data stays.

Provider failures never leave this module: they are logged and stored as the
`error` status.
"""
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Any, Dict, Optional
from tripboard.core.exceptions import FlightLookupError
from tripboard.core.utils import utc_now, parse_instant
from tripboard.models.segment import Segment, TransportMode, FlightFetchStatus
from tripboard.services import flight_client
import logging

logger = logging.getLogger(__name__)

ENRICHMENT_FIELDS = (
    "flight_status",
    "flight_airline",
    "flight_departure",
    "flight_arrival",
    "flight_delay_minutes",
    "flight_gate_departure",
    "flight_gate_arrival",
    "flight_terminal_dep",
    "flight_terminal_arr",
    "flight_baggage",
    "flight_meta",
)


def should_enrich(transport_mode: Any, flight_number: Optional[str], start_time: Any) -> bool:
    """True for flight segments with a flight number and a parseable start time."""
    if transport_mode not in (TransportMode.FLIGHT, TransportMode.FLIGHT.value):
        return False
    if not flight_number or not flight_number.strip():
        return False
    return parse_instant(start_time) is not None


def lookup_key(flight_number: str, lookup_date: date) -> str:
    return f"{flight_number.strip().upper()}/{lookup_date.isoformat()}"


def _write_result(
    segment: Segment,
    status: FlightFetchStatus,
    record: Optional[Dict[str, Any]],
    key: str,
    now: datetime
) -> None:
    if status == FlightFetchStatus.OK:
        for field in ENRICHMENT_FIELDS:
            setattr(segment, field, record.get(field))
    elif status == FlightFetchStatus.NOT_FOUND or segment.flight_lookup_key != key:
        for field in ENRICHMENT_FIELDS:
            setattr(segment, field, None)
    segment.flight_lookup_key = key
    segment.flight_last_fetched_at = now
    segment.flight_last_fetch_status = status
    segment.flight_auto_sync = True


def enrich_segment(
    segment_id: int,
    transport_mode: Any,
    flight_number: Optional[str],
    start_time: Any,
    db: Session,
    now: Optional[datetime] = None
) -> Optional[FlightFetchStatus]:
    """
    Look up live flight data for a segment and store it.

    Returns the recorded fetch status, or None when the segment is not an
    enrichable flight (nothing is written in that case).
    """
    if not should_enrich(transport_mode, flight_number, start_time):
        return None

    segment = db.query(Segment).filter(Segment.id == segment_id).first()
    if not segment:
        logger.warning(f"Segment {segment_id} vanished before flight enrichment")
        return None

    lookup_date = parse_instant(start_time).date()
    key = lookup_key(flight_number, lookup_date)
    now = now or utc_now()
    record = None

    try:
        record = flight_client.fetch_by_number_and_date(flight_number.strip(), lookup_date, db)
    except FlightLookupError as e:
        logger.warning(f"Flight lookup failed for segment {segment_id} ({flight_number} {lookup_date}): {e.message}")
        status = FlightFetchStatus.ERROR
    except Exception as e:
        logger.error(f"Unexpected flight lookup error for segment {segment_id}: {e}", exc_info=True)
        status = FlightFetchStatus.ERROR
    else:
        if record is None:
            logger.info(f"Flight {flight_number} on {lookup_date} not found (segment {segment_id})")
            status = FlightFetchStatus.NOT_FOUND
        else:
            logger.info(f"Enriched segment {segment_id} with flight {flight_number} ({record.get('flight_status')})")
            status = FlightFetchStatus.OK

    _write_result(segment, status, record, key, now)
    db.commit()
    return status
