"""
AeroDataBox flight lookup client.

API Documentation: https://doc.aerodatabox.com/
Endpoint: /flights/number/{flightNumber}/{date}?withLeg=true

The API key is read from the environment first (AERODATABOX_API_KEY) and
falls back to the key an admin stored in the settings table.
"""
from sqlalchemy.orm import Session
from datetime import date
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote
from tripboard.core.config import settings
from tripboard.core.exceptions import FlightLookupError
from tripboard.services.settings_service import get_setting
import httpx
import logging

logger = logging.getLogger(__name__)

API_KEY_SETTING = "AERODATABOX_API_KEY"


def get_api_key(db: Session) -> Tuple[Optional[str], Optional[str]]:
    """Return (api_key, source) where source is "env", "db" or None."""
    if settings.AERODATABOX_API_KEY:
        return settings.AERODATABOX_API_KEY, "env"
    stored = get_setting(API_KEY_SETTING, db)
    if stored:
        return stored, "db"
    return None, None


def fetch_by_number_and_date(flight_number: str, flight_date: date, db: Session) -> Optional[Dict[str, Any]]:
    """
    Look up a flight by number and (UTC) date.

    Returns:
        Normalized flight record, or None when the provider knows no such
        flight or no API key is configured

    Raises:
        FlightLookupError: network error or timeout, non-2xx response,
            non-JSON, unparsable or wrongly shaped body
    """
    api_key, _ = get_api_key(db)
    if not api_key:
        logger.warning("AERODATABOX_API_KEY missing; skipping flight lookup")
        return None

    base_url = settings.AERODATABOX_BASE_URL.rstrip("/")
    api_url = f"{base_url}/flights/number/{quote(flight_number.strip(), safe='')}/{flight_date.isoformat()}"
    logger.info(f"Fetching flight {flight_number} on {flight_date} from AeroDataBox")

    try:
        response = httpx.get(
            api_url,
            params={"withLeg": "true"},
            headers={"X-Api-Key": api_key, "Accept": "application/json"},
            timeout=settings.FLIGHT_API_TIMEOUT,
        )
    except httpx.HTTPError as e:
        # Network errors and timeouts
        logger.error(f"HTTP error with AeroDataBox: {e}")
        raise FlightLookupError(f"AeroDataBox network error: {e}")

    if response.status_code == 204:
        # AeroDataBox answers 204 No Content for unknown flights
        return None

    if not response.is_success:
        logger.warning(f"AeroDataBox error {response.status_code}: {response.text[:200]}")
        raise FlightLookupError(
            f"AeroDataBox failed: {response.status_code}",
            details={"status_code": response.status_code}
        )

    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        logger.error(f"AeroDataBox non-JSON response: {response.text[:200]}")
        raise FlightLookupError("Unexpected response from AeroDataBox")

    try:
        data = response.json()
    except ValueError:
        logger.error("Failed to parse AeroDataBox response", exc_info=True)
        raise FlightLookupError("Failed to parse AeroDataBox response")

    # The endpoint returns a bare list; older gateways wrap it in {"flights": [...]}
    if isinstance(data, dict):
        flights = data.get("flights") or []
    elif isinstance(data, list):
        flights = data
    else:
        raise FlightLookupError("Unexpected response from AeroDataBox")

    if not flights:
        return None

    flight = flights[0]
    if not isinstance(flight, dict):
        raise FlightLookupError("Unexpected response from AeroDataBox")

    try:
        return normalize_flight(flight)
    except (AttributeError, TypeError, ValueError) as e:
        logger.error(f"Malformed AeroDataBox flight record: {e}")
        raise FlightLookupError("Unexpected response from AeroDataBox")


def _section(flight: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    value = flight.get(name)
    if not value:
        return None
    if not isinstance(value, dict):
        raise TypeError(f"{name} is {type(value).__name__}, expected an object")
    return value


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"expected a scalar, got {type(value).__name__}")
    return str(value)


def normalize_flight(flight: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a provider flight into segment enrichment columns.

    Raises:
        TypeError: a section or value has an unexpected type
    """
    departure = _section(flight, "departure")
    arrival = _section(flight, "arrival")
    airline = _section(flight, "airline") or {}
    delay = flight.get("delay")

    return {
        "flight_status": _text(flight.get("status")),
        "flight_airline": _text(airline.get("name")),
        "flight_departure": departure,
        "flight_arrival": arrival,
        "flight_delay_minutes": round(delay) if isinstance(delay, (int, float)) and not isinstance(delay, bool) else None,
        "flight_gate_departure": _text((departure or {}).get("gate")),
        "flight_gate_arrival": _text((arrival or {}).get("gate")),
        "flight_terminal_dep": _text((departure or {}).get("terminal")),
        "flight_terminal_arr": _text((arrival or {}).get("terminal")),
        "flight_baggage": _text((arrival or {}).get("baggageBelt")) or _text((arrival or {}).get("baggage")),
        "flight_meta": flight,
    }
