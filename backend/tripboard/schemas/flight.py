"""
Pydantic schemas for flight lookup and flight API key administration.
"""
from pydantic import BaseModel
from typing import Any, Dict, Optional


class FlightLookupResponse(BaseModel):
    """Raw lookup result."""
    found: bool
    data: Optional[Dict[str, Any]] = None


class FlightApiKeyUpdate(BaseModel):
    """An empty or missing key removes the stored key."""
    api_key: Optional[str] = None


class FlightApiKeyStatus(BaseModel):
    """Where the active key comes from: env, db or nowhere."""
    has_key: bool
    source: Optional[str] = None
    enabled: bool = False
