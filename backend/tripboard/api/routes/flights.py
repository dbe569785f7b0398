"""
Flight lookup route.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from tripboard.core.exceptions import ValidationError
from tripboard.db.session import get_db
from tripboard.models.user import User
from tripboard.schemas.flight import FlightLookupResponse
from tripboard.services import flight_client
from tripboard.api.dependencies import get_current_user

router = APIRouter(prefix="/flights", tags=["flights"])


@router.get("/lookup", response_model=FlightLookupResponse)
def lookup_flight(
    flight_number: Optional[str] = None,
    date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Look up a flight by number and date (YYYY-MM-DD) without storing anything."""
    if not flight_number or not flight_number.strip() or date is None:
        raise ValidationError("flight_number and date are required (YYYY-MM-DD)")

    data = flight_client.fetch_by_number_and_date(flight_number, date, db)
    if data is None:
        return FlightLookupResponse(found=False)
    return FlightLookupResponse(found=True, data=data)
