"""
Budget API Endpoints - CRUD operations for deliverable budgets.

Implements:
- GET    /api/v1/deliverables/{deliverable_id}/budgets - List budgets
- POST   /api/v1/deliverables/{deliverable_id}/budgets - Create labor, overhead or fixed budget
- PATCH  /api/v1/budgets/{id} - Update budget
- DELETE /api/v1/budgets/{id} - Delete budget
"""
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from billing_contracts.models import get_db
from billing_contracts.infrastructure.repositories import BudgetRepository, DeliverableRepository
from billing_contracts.domain.exceptions import (
    BudgetNotFoundError,
    DeliverableNotFoundError,
    RecordInvalidError,
)

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class BudgetBase(BaseModel):
    time_entry_activity_id: Optional[int] = None
    title: Optional[str] = Field(None, max_length=255)
    hours: Optional[float] = Field(None, ge=0, description="Planned hours")
    budget: Optional[Union[Decimal, str]] = Field(None, description="Planned cost; accepts '$1,000.00'")
    markup: Optional[str] = Field(None, max_length=50, description="'10%' or '$50.00'")
    paid: Optional[bool] = None


class BudgetCreate(BudgetBase):
    """Request model for creating a budget."""
    type: str = Field(..., pattern="^(Labor|Overhead|Fixed)Budget$")


class BudgetUpdate(BudgetBase):
    """Request model for updating a budget."""
    pass


class BudgetResponse(BaseModel):
    """Response model for a budget."""
    id: int
    deliverable_id: int
    type: str
    time_entry_activity_id: Optional[int]
    title: Optional[str]
    hours: Optional[float]
    budget: Optional[float]
    markup: Optional[str]
    paid: bool
    total: float


class BudgetListResponse(BaseModel):
    budgets: List[BudgetResponse]
    total: int
    total_budget: float


def budget_to_dict(budget) -> dict:
    return {
        'id': budget.id,
        'deliverable_id': budget.deliverable_id,
        'type': budget.type,
        'time_entry_activity_id': budget.time_entry_activity_id,
        'title': budget.title,
        'hours': budget.hours,
        'budget': float(budget.budget) if budget.budget is not None else None,
        'markup': budget.markup,
        'paid': bool(budget.paid),
        'total': float(budget.total()),
    }


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "/deliverables/{deliverable_id}/budgets",
    response_model=BudgetListResponse,
    summary="List budgets of a deliverable"
)
def list_budgets(deliverable_id: int, db: Session = Depends(get_db)):
    try:
        DeliverableRepository(db).get_or_raise(deliverable_id)
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    budgets = BudgetRepository(db).get_by_deliverable(deliverable_id)
    return {
        'budgets': [budget_to_dict(b) for b in budgets],
        'total': len(budgets),
        'total_budget': float(sum(b.total() for b in budgets)),
    }


@router.post(
    "/deliverables/{deliverable_id}/budgets",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a budget on a deliverable"
)
def create_budget(deliverable_id: int, budget_data: BudgetCreate, db: Session = Depends(get_db)):
    repo = BudgetRepository(db)
    attributes = budget_data.model_dump(exclude_unset=True)
    budget_type = attributes.pop("type")

    try:
        budget = repo.create(deliverable_id, budget_type, attributes)
        db.commit()
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RecordInvalidError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"errors": e.errors})
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return budget_to_dict(budget)


@router.patch(
    "/budgets/{budget_id}",
    response_model=BudgetResponse,
    summary="Update a budget"
)
def update_budget(budget_id: int, budget_data: BudgetUpdate, db: Session = Depends(get_db)):
    repo = BudgetRepository(db)
    try:
        budget = repo.update(budget_id, budget_data.model_dump(exclude_unset=True))
        db.commit()
    except BudgetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RecordInvalidError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"errors": e.errors})
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return budget_to_dict(budget)


@router.delete(
    "/budgets/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a budget"
)
def delete_budget(budget_id: int, db: Session = Depends(get_db)):
    repo = BudgetRepository(db)
    try:
        repo.delete_budget(budget_id)
        db.commit()
    except BudgetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
