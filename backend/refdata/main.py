"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize logging from settings.
- Wire reference data lifecycle hooks and admin routes.
- Provide `app` object used by ASGI server (uvicorn / hypercorn).

Applications declaring reference data models import them before startup so
the lifespan hook can load them.
"""

from fastapi import FastAPI

from refdata.api.lifecycle import install_reference_data, reference_data_lifespan
from refdata.core.logging import configure_logging

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging()

app = FastAPI(
    title="Reference Data Service",
    description="Inspect and invalidate cached reference data",
    version="0.1.0",
    lifespan=reference_data_lifespan,
)

install_reference_data(app)

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "Reference data service running"}
