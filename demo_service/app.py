"""
FastAPI service for the update vs. upsert demo.

Provides endpoints for running the demo script, resetting and seeding the
contacts collection, listing contacts and upserting a single contact.
Every request runs one unit of work against the shared contact gateway.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contact_store import ConnectivityError, reset_contact_gateway
from contact_store.logger import setup_logging

from . import __version__
from .config import get_settings, validate_config_on_startup
from .dependencies import get_gateway
from .models import HealthResponse
from .routes import contacts_router, demo_router

settings = get_settings()

setup_logging(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)

# Validate configuration at import time so a bad env fails fast
validate_config_on_startup()

app = FastAPI(title="Contact Upsert Demo", version=__version__)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(demo_router)
app.include_router(contacts_router)


@app.on_event("startup")
def ensure_indexes_on_startup():
    """
    Establish the unique email index before serving requests.

    ConstraintSetupError is fatal and stops startup. If MongoDB is not
    reachable yet, the index is created on the first write instead.
    """
    if not settings.ensure_index_on_startup:
        logger.info("Skipping index setup on startup (ENSURE_INDEX_ON_STARTUP=false)")
        return

    try:
        get_gateway().ensure_unique_index()
        logger.info("✅ Unique email index ready")
    except ConnectivityError as e:
        logger.warning(f"MongoDB not reachable on startup, index deferred to first write: {e}")


@app.on_event("shutdown")
def close_gateway():
    """Release the MongoDB connection pool."""
    reset_contact_gateway()


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Liveness check; does not touch MongoDB."""
    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )
