"""
lifecycle.py — Framework Hooks Driving Reference Data Invalidation

Purpose:
- Load every registered reference data type when the application starts.
- Optionally reset every cache at the end of each request (unit-of-work boundary).
- Mount the admin router.

These hooks are the only places the web layer mutates cache state; they call
into the registry and never touch cached rows themselves.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from refdata.core.config import settings
from refdata.core.logging import get_logger
from refdata.reference.registry import registry


logger = get_logger(__name__)


@asynccontextmanager
async def reference_data_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    FastAPI lifespan: force-load reference data at startup, drop it at shutdown.
    """
    if settings.REFDATA_LOAD_ON_STARTUP:
        registry.load_all()
        logger.info("Loaded %d reference data type(s) at startup", len(registry))
    yield
    registry.reset_all()


class ResetReferenceDataMiddleware(BaseHTTPMiddleware):
    """Reset every reference data cache once the response has been produced."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        finally:
            registry.reset_all()


def install_reference_data(app: FastAPI) -> None:
    """Mount middleware and admin routes according to settings."""
    from refdata.api.v1 import reference_data

    if settings.REFDATA_RESET_PER_REQUEST:
        app.add_middleware(ResetReferenceDataMiddleware)
    if settings.REFDATA_ADMIN_ENABLED:
        app.include_router(reference_data.router, prefix="/api/v1")
