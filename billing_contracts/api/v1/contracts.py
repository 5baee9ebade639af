"""
Contract API Endpoints - CRUD and status operations, nested under projects.

Implements:
- GET    /api/v1/projects/{project_id}/contracts - List contracts of a project
- POST   /api/v1/projects/{project_id}/contracts - Create contract
- GET    /api/v1/projects/{project_id}/contracts/{id} - Get contract
- PATCH  /api/v1/projects/{project_id}/contracts/{id} - Update contract
- DELETE /api/v1/projects/{project_id}/contracts/{id} - Delete contract (if open)
- POST   /api/v1/projects/{project_id}/contracts/{id}/{action} - lock, unlock, close, reopen
- GET    /api/v1/projects/{project_id}/contracts/{id}/summary - Totals
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from billing_contracts.models import Project, get_db
from billing_contracts.infrastructure.repositories import ContractRepository
from billing_contracts.domain.services import ContractService, STATUS_ACTIONS
from billing_contracts.domain.exceptions import (
    ContractLockedError,
    ContractNotFoundError,
    InvalidStatusTransitionError,
    ProjectNotFoundError,
    RecordInvalidError,
)

router = APIRouter()

Money = Optional[Union[Decimal, str]]


# =============================================================================
# Pydantic Models
# =============================================================================

class ContractBase(BaseModel):
    """Editable contract fields. project_id is taken from the URL only."""
    name: Optional[str] = Field(None, max_length=255)
    account_executive_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    executed: Optional[bool] = None
    billable_rate: Money = Field(None, description="Hourly rate; accepts '$150.00'")
    discount: Money = Field(None, description="Flat amount for '$', percentage for '%'")
    discount_type: Optional[str] = Field(None, description="'$', '%' or empty")
    discount_note: Optional[str] = None
    payment_terms: Optional[str] = Field(None, max_length=100)
    client_ap_contact_information: Optional[str] = None
    po_number: Optional[str] = Field(None, max_length=100)
    details: Optional[str] = None


class ContractCreate(ContractBase):
    """Request model for creating a contract."""
    name: str = Field(..., min_length=1, max_length=255)
    executed: bool = False


class ContractUpdate(ContractBase):
    """Request model for updating a contract."""
    pass


class ContractResponse(BaseModel):
    """Response model for a contract."""
    id: int
    project_id: int
    account_executive_id: Optional[int]
    name: str
    start_date: Optional[date]
    end_date: Optional[date]
    executed: bool
    billable_rate: Optional[float]
    discount: Optional[float]
    discount_type: Optional[str]
    discount_note: Optional[str]
    payment_terms: Optional[str]
    client_ap_contact_information: Optional[str]
    po_number: Optional[str]
    details: Optional[str]
    status: str

    model_config = ConfigDict(from_attributes=True)


class ContractListResponse(BaseModel):
    """Response for listing contracts."""
    contracts: List[ContractResponse]
    total: int


class ContractSummaryResponse(BaseModel):
    contract_id: int
    name: str
    status: str
    deliverable_count: int
    total_amount: float
    discount_amount: float
    total_after_discount: float
    total_spent: float
    amount_remaining: float


def _split_attributes(payload: ContractBase):
    attributes = payload.model_dump(exclude_unset=True)
    discount_type = attributes.pop("discount_type", None)
    return attributes, discount_type


def _ensure_project(db: Session, project_id: int) -> None:
    if not db.query(Project).filter(Project.id == project_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ProjectNotFoundError(project_id).message
        )


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "/projects/{project_id}/contracts",
    response_model=ContractListResponse,
    summary="List contracts for a project"
)
def list_contracts(project_id: int, db: Session = Depends(get_db)):
    """List all contracts of a project."""
    _ensure_project(db, project_id)
    contracts = ContractRepository(db).get_by_project(project_id)
    return {
        'contracts': contracts,
        'total': len(contracts),
    }


@router.post(
    "/projects/{project_id}/contracts",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a contract for a project"
)
def create_contract(project_id: int, contract_data: ContractCreate, db: Session = Depends(get_db)):
    """
    Create a contract.

    Validates:
    - Required fields (name, account executive, dates, executed)
    - End date after start date
    - Discount type
    """
    repo = ContractRepository(db)
    attributes, discount_type = _split_attributes(contract_data)

    try:
        contract = repo.create(project_id, attributes, discount_type=discount_type)
        db.commit()
    except ProjectNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RecordInvalidError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"errors": e.errors})
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return contract


@router.get(
    "/projects/{project_id}/contracts/{contract_id}",
    response_model=ContractResponse,
    summary="Get contract by ID"
)
def get_contract(project_id: int, contract_id: int, db: Session = Depends(get_db)):
    try:
        return ContractRepository(db).get_or_raise(contract_id, project_id=project_id)
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.patch(
    "/projects/{project_id}/contracts/{contract_id}",
    response_model=ContractResponse,
    summary="Update a contract"
)
def update_contract(
    project_id: int,
    contract_id: int,
    contract_data: ContractUpdate,
    db: Session = Depends(get_db)
):
    repo = ContractRepository(db)
    attributes, discount_type = _split_attributes(contract_data)

    try:
        repo.get_or_raise(contract_id, project_id=project_id)
        contract = repo.update(contract_id, attributes, discount_type=discount_type)
        db.commit()
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RecordInvalidError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"errors": e.errors})
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return contract


@router.delete(
    "/projects/{project_id}/contracts/{contract_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a contract",
    description="Delete a contract and its deliverables. Fails if the contract is locked or closed."
)
def delete_contract(project_id: int, contract_id: int, db: Session = Depends(get_db)):
    repo = ContractRepository(db)

    try:
        repo.get_or_raise(contract_id, project_id=project_id)
        repo.delete_contract(contract_id)
        db.commit()
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ContractLockedError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.post(
    "/projects/{project_id}/contracts/{contract_id}/{action}",
    response_model=ContractResponse,
    summary="Lock, unlock, close or reopen a contract"
)
def change_contract_status(
    project_id: int,
    contract_id: int,
    action: str,
    db: Session = Depends(get_db)
):
    if action not in STATUS_ACTIONS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown action '{action}'")

    service = ContractService(db)
    try:
        service.contract_repo.get_or_raise(contract_id, project_id=project_id)
        contract = service.change_status(contract_id, action)
        db.commit()
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InvalidStatusTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return contract


@router.get(
    "/projects/{project_id}/contracts/{contract_id}/summary",
    response_model=ContractSummaryResponse,
    summary="Contract totals across deliverables"
)
def get_contract_summary(project_id: int, contract_id: int, db: Session = Depends(get_db)):
    service = ContractService(db)
    try:
        service.contract_repo.get_or_raise(contract_id, project_id=project_id)
        return service.summary(contract_id).to_dict()
    except ContractNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
