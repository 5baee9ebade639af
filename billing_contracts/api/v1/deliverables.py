"""
Deliverable API Endpoints - CRUD, status and reporting for deliverables.

Implements:
- GET    /api/v1/contracts/{contract_id}/deliverables - List deliverables
- POST   /api/v1/contracts/{contract_id}/deliverables - Create deliverable (contract must be open)
- GET    /api/v1/deliverables/{id} - Get deliverable with totals
- PATCH  /api/v1/deliverables/{id} - Update deliverable
- DELETE /api/v1/deliverables/{id} - Delete deliverable (contract must be open)
- POST   /api/v1/deliverables/{id}/{action} - lock, unlock, close, reopen
- GET    /api/v1/deliverables/{id}/report - Spent vs. budgeted report
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from billing_contracts.models import get_db
from billing_contracts.infrastructure.repositories import ContractRepository, DeliverableRepository
from billing_contracts.domain.services import DeliverableReportService, STATUS_ACTIONS
from billing_contracts.domain.exceptions import (
    ContractLockedError,
    ContractNotFoundError,
    DeliverableNotFoundError,
    InvalidStatusTransitionError,
    RecordInvalidError,
)

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class DeliverableBase(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    manager_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    feature_sign_off: Optional[bool] = None
    warranty_sign_off: Optional[bool] = None
    total: Optional[Union[Decimal, str]] = Field(None, description="Accepts '$20,100.00'")


class DeliverableCreate(DeliverableBase):
    """Request model for creating a deliverable."""
    type: str = Field(..., pattern="^(Fixed|Hourly|Retainer)Deliverable$")
    title: str = Field(..., min_length=1, max_length=255)


class DeliverableUpdate(DeliverableBase):
    """Request model for updating a deliverable."""
    pass


class DeliverableResponse(BaseModel):
    """Response model for a deliverable with computed totals."""
    id: int
    contract_id: Optional[int]
    type: str
    title: str
    manager_id: Optional[int]
    start_date: Optional[date]
    end_date: Optional[date]
    notes: Optional[str]
    feature_sign_off: bool
    warranty_sign_off: bool
    status: Optional[str]
    total: Optional[float]
    current_total: float
    total_spent: float
    profit_left: float


class DeliverableListResponse(BaseModel):
    deliverables: List[DeliverableResponse]
    total: int


def deliverable_to_dict(deliverable) -> dict:
    return {
        'id': deliverable.id,
        'contract_id': deliverable.contract_id,
        'type': deliverable.type,
        'title': deliverable.title,
        'manager_id': deliverable.manager_id,
        'start_date': deliverable.start_date,
        'end_date': deliverable.end_date,
        'notes': deliverable.notes,
        'feature_sign_off': bool(deliverable.feature_sign_off),
        'warranty_sign_off': bool(deliverable.warranty_sign_off),
        'status': deliverable.status,
        'total': float(deliverable.total) if deliverable.total is not None else None,
        'current_total': float(deliverable.current_total()),
        'total_spent': float(deliverable.total_spent()),
        'profit_left': float(deliverable.profit_left()),
    }


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "/contracts/{contract_id}/deliverables",
    response_model=DeliverableListResponse,
    summary="List deliverables of a contract"
)
def list_deliverables(contract_id: int, db: Session = Depends(get_db)):
    try:
        ContractRepository(db).get_or_raise(contract_id)
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    deliverables = DeliverableRepository(db).get_by_contract(contract_id)
    return {
        'deliverables': [deliverable_to_dict(d) for d in deliverables],
        'total': len(deliverables),
    }


@router.post(
    "/contracts/{contract_id}/deliverables",
    response_model=DeliverableResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a deliverable",
    description="Create a fixed, hourly or retainer deliverable. Fails on locked or closed contracts."
)
def create_deliverable(
    contract_id: int,
    deliverable_data: DeliverableCreate,
    db: Session = Depends(get_db)
):
    repo = DeliverableRepository(db)
    attributes = deliverable_data.model_dump(exclude_unset=True)
    deliverable_type = attributes.pop("type")

    try:
        deliverable = repo.create(contract_id, deliverable_type, attributes)
        db.commit()
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RecordInvalidError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"errors": e.errors})
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return deliverable_to_dict(deliverable)


@router.get(
    "/deliverables/{deliverable_id}",
    response_model=DeliverableResponse,
    summary="Get deliverable by ID"
)
def get_deliverable(deliverable_id: int, db: Session = Depends(get_db)):
    try:
        return deliverable_to_dict(DeliverableRepository(db).get_or_raise(deliverable_id))
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.patch(
    "/deliverables/{deliverable_id}",
    response_model=DeliverableResponse,
    summary="Update a deliverable"
)
def update_deliverable(
    deliverable_id: int,
    deliverable_data: DeliverableUpdate,
    db: Session = Depends(get_db)
):
    repo = DeliverableRepository(db)
    try:
        deliverable = repo.update(deliverable_id, deliverable_data.model_dump(exclude_unset=True))
        db.commit()
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RecordInvalidError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"errors": e.errors})
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return deliverable_to_dict(deliverable)


@router.delete(
    "/deliverables/{deliverable_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a deliverable",
    description="Delete a deliverable and its budgets. Fails if the contract is locked or closed."
)
def delete_deliverable(deliverable_id: int, db: Session = Depends(get_db)):
    repo = DeliverableRepository(db)
    try:
        repo.delete_deliverable(deliverable_id)
        db.commit()
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ContractLockedError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.post(
    "/deliverables/{deliverable_id}/{action}",
    response_model=DeliverableResponse,
    summary="Lock, unlock, close or reopen a deliverable"
)
def change_deliverable_status(deliverable_id: int, action: str, db: Session = Depends(get_db)):
    if action not in STATUS_ACTIONS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown action '{action}'")

    repo = DeliverableRepository(db)
    try:
        deliverable = repo.get_or_raise(deliverable_id)
        getattr(deliverable, action)()
        db.commit()
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InvalidStatusTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return deliverable_to_dict(deliverable)


@router.get(
    "/deliverables/{deliverable_id}/report",
    summary="Spent vs. budgeted report",
    description="Hours and cost per activity, user and issue category"
)
def get_deliverable_report(deliverable_id: int, db: Session = Depends(get_db)):
    try:
        return DeliverableReportService(db).build(deliverable_id).to_dict()
    except DeliverableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
