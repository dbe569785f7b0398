"""
FastAPI entrypoint for Tripboard backend application.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from tripboard.core.config import settings
from tripboard.core.exceptions import TripboardException
from tripboard.core.logging import configure_logging
from tripboard.db.session import SessionLocal
from tripboard.services.flight_sync import FlightSyncScheduler
from tripboard.api.router import api_router
import logging
import os

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the flight sync task when enabled, and stop it on shutdown."""
    scheduler = None
    if settings.FLIGHT_AUTO_SYNC_ENABLED:
        scheduler = FlightSyncScheduler(
            SessionLocal,
            interval_seconds=settings.FLIGHT_SYNC_INTERVAL_SECONDS,
            throttle_minutes=settings.FLIGHT_SYNC_THROTTLE_MINUTES,
        )
        scheduler.start()
    else:
        logger.info("Flight auto sync disabled")
    app.state.flight_sync = scheduler
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()


app = FastAPI(
    title="Tripboard API",
    description="Backend API for shared trip itineraries",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TripboardException)
async def tripboard_exception_handler(request: Request, exc: TripboardException):
    """Render service errors as JSON with their status code."""
    content = {"detail": exc.message, "error_code": exc.error_code.value}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


# Serve uploaded files (cover images, attachments) at /uploads
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Tripboard API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
