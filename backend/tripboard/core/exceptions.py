"""
Custom exceptions for the Tripboard backend.

Services raise these; the handler registered in main.py turns them into
JSON error responses.
"""
from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EXTERNAL_FAILURE = "EXTERNAL_FAILURE"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


class TripboardException(Exception):
    """Base exception for the Tripboard backend."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code


class NotFoundError(TripboardException):
    """
    Raised when a record is absent.

    Also raised when the caller has no access at all to a trip, so that
    trip existence is never revealed to outsiders.
    """

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.NOT_FOUND,
            details=details,
            status_code=404
        )


class ForbiddenError(TripboardException):
    """Raised when the caller has some access to a trip, but not enough."""

    def __init__(self, message: str = "Not enough permissions for this trip", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.FORBIDDEN,
            details=details,
            status_code=403
        )


class ValidationError(TripboardException):
    """Raised on malformed or contradictory input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details=details,
            status_code=400
        )


class FlightLookupError(TripboardException):
    """Raised when the flight data provider fails (network, timeout, bad response, no key)."""

    def __init__(self, message: str = "Flight lookup failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.EXTERNAL_FAILURE,
            details=details,
            status_code=502
        )


class AuthenticationError(TripboardException):
    """Raised when credentials or tokens are rejected."""

    def __init__(self, message: str = "Could not validate credentials", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTHENTICATION_FAILED,
            details=details,
            status_code=401
        )
