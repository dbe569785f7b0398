"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from tripboard.api.routes import (
    auth, users, admin, trips, segments, flights
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
api_router.include_router(trips.router)
api_router.include_router(segments.router)
api_router.include_router(flights.router)
