"""
Main FastAPI Application for the billing contracts plugin.
Serves the v1 REST API for contracts, deliverables and budgets.
"""
import logging

from fastapi import FastAPI

from billing_contracts import __version__
from billing_contracts.models import init_db, get_db  # noqa: F401
from billing_contracts.api.v1 import api_router as v1_router

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Billing Contracts",
    description="Contracts, deliverables and budgets with spent vs. budgeted reporting",
    version=__version__
)

# Include v1 API routes
app.include_router(v1_router)


@app.on_event("startup")
def startup_event():
    """Create tables on startup."""
    init_db()
    logger.info("Billing contracts API started")


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}
