"""
API v1 - REST endpoints for the billing contracts plugin.

- Contract endpoints (CRUD and status, nested under projects)
- Budget endpoints (CRUD, nested under deliverables)
- Deliverable endpoints (CRUD, status, report)
"""
from fastapi import APIRouter

from .contracts import router as contracts_router
from .deliverables import router as deliverables_router
from .budgets import router as budgets_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(contracts_router, tags=["Contracts"])
# Budgets before deliverables: /deliverables/{id}/budgets must win over /deliverables/{id}/{action}
api_router.include_router(budgets_router, tags=["Budgets"])
api_router.include_router(deliverables_router, tags=["Deliverables"])
