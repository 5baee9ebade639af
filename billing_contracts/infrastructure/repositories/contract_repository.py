"""
Contract Repository - Data access layer for Contract entities.

Contracts are created under a host project. The project and the discount
type are never taken from bulk attributes; they are passed explicitly.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from billing_contracts.models import Contract, Project
from billing_contracts.domain.exceptions import (
    ContractLockedError,
    ContractNotFoundError,
    ProjectNotFoundError,
)
from billing_contracts.domain.events.handlers import ensure_valid
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ContractRepository(BaseRepository[Contract]):
    """Repository for Contract entities."""

    def __init__(self, session: Session):
        super().__init__(session, Contract)

    def get_or_raise(self, contract_id: int, project_id: Optional[int] = None) -> Contract:
        """
        Get a contract, optionally scoped to a project.

        Raises:
            ContractNotFoundError: If no such contract exists in the scope
        """
        query = self.session.query(Contract).filter(Contract.id == contract_id)
        if project_id is not None:
            query = query.filter(Contract.project_id == project_id)
        contract = query.first()
        if not contract:
            raise ContractNotFoundError(contract_id)
        return contract

    def get_by_project(self, project_id: int) -> List[Contract]:
        """
        Get all contracts for a project.

        Args:
            project_id: Host project identifier

        Returns:
            List of contracts ordered by start date
        """
        return self.session.query(Contract).filter(
            Contract.project_id == project_id
        ).order_by(Contract.start_date, Contract.id).all()

    def get_by_status(self, status: str) -> List[Contract]:
        return self.session.query(Contract).filter(Contract.status == status).all()

    def create(
        self,
        project_id: int,
        attributes: Dict,
        discount_type: Optional[str] = None
    ) -> Contract:
        """
        Create a contract under a project.

        Args:
            project_id: Host project identifier
            attributes: Contract fields; protected attributes are ignored
            discount_type: "$", "%" or None

        Returns:
            Created contract (flushed, so validation has run)

        Raises:
            ProjectNotFoundError: If the project does not exist
            RecordInvalidError: If the contract fails validation
        """
        project = self.session.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ProjectNotFoundError(project_id)

        contract = Contract()
        contract.assign_attributes(attributes)
        contract.project = project
        contract.discount_type = discount_type
        ensure_valid(contract, self.session)

        self.add(contract)
        self.flush()
        logger.info(f"Created contract {contract.id} '{contract.name}' for project {project_id}")
        return contract

    def update(
        self,
        contract_id: int,
        attributes: Dict,
        discount_type: Optional[str] = None
    ) -> Contract:
        """
        Update a contract's attributes.

        Protected attributes in `attributes` are ignored; the discount type
        only changes when passed explicitly.
        """
        contract = self.get_or_raise(contract_id)
        contract.assign_attributes(attributes)
        if discount_type is not None:
            contract.discount_type = discount_type
        ensure_valid(contract, self.session)
        self.flush()
        return contract

    def delete_contract(self, contract_id: int) -> None:
        """
        Delete a contract and its deliverables.

        Raises:
            ContractNotFoundError: If contract not found
            ContractLockedError: If the contract is locked or closed
        """
        contract = self.get_or_raise(contract_id)
        if contract.is_locked or contract.is_closed:
            raise ContractLockedError(contract.id, contract.status, action="delete")

        for deliverable in list(contract.deliverables):
            self.session.delete(deliverable)
        self.delete(contract)
        logger.info(f"Deleted contract {contract_id}")
