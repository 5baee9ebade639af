"""
Deliverable Repository - Data access layer for Deliverable entities.

Implements repository pattern for Deliverable operations with:
- Type-aware creation (fixed, hourly, retainer)
- Locked/closed contract protection on create and delete
"""
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from billing_contracts.models import (
    Contract,
    Deliverable,
    FixedDeliverable,
    HourlyDeliverable,
    RetainerDeliverable,
)
from billing_contracts.domain.exceptions import (
    ContractNotFoundError,
    DeliverableNotFoundError,
    RecordInvalidError,
)
from billing_contracts.domain.events.handlers import ensure_deliverable_removable, ensure_valid
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

DELIVERABLE_TYPES = {
    "FixedDeliverable": FixedDeliverable,
    "HourlyDeliverable": HourlyDeliverable,
    "RetainerDeliverable": RetainerDeliverable,
}


class DeliverableRepository(BaseRepository[Deliverable]):
    """Repository for Deliverable entities of every type."""

    def __init__(self, session: Session):
        super().__init__(session, Deliverable)

    def get_or_raise(self, deliverable_id: int) -> Deliverable:
        deliverable = self.get_by_id(deliverable_id)
        if not deliverable:
            raise DeliverableNotFoundError(deliverable_id)
        return deliverable

    def get_by_contract(self, contract_id: int) -> List[Deliverable]:
        """
        Get all deliverables of a contract.

        Args:
            contract_id: Parent contract identifier

        Returns:
            List of deliverables ordered by id
        """
        return self.session.query(Deliverable).filter(
            Deliverable.contract_id == contract_id
        ).order_by(Deliverable.id).all()

    def get_by_manager(self, user_id: int) -> List[Deliverable]:
        return self.session.query(Deliverable).filter(
            Deliverable.manager_id == user_id
        ).order_by(Deliverable.id).all()

    def create(self, contract_id: int, deliverable_type: str, attributes: Dict) -> Deliverable:
        """
        Create a deliverable of the given type on a contract.

        Args:
            contract_id: Parent contract identifier
            deliverable_type: FixedDeliverable, HourlyDeliverable or RetainerDeliverable
            attributes: Deliverable fields

        Returns:
            Created deliverable (flushed, so validation has run)

        Raises:
            ContractNotFoundError: If contract not found
            RecordInvalidError: If the type is unknown, the deliverable is
                invalid or the contract is locked or closed
        """
        contract = self.session.query(Contract).filter(Contract.id == contract_id).first()
        if not contract:
            raise ContractNotFoundError(contract_id)

        deliverable_class = DELIVERABLE_TYPES.get(deliverable_type)
        if deliverable_class is None:
            raise RecordInvalidError("Deliverable", {"type": ["is not included in the list"]})

        deliverable = deliverable_class()
        deliverable.assign_attributes(attributes)
        deliverable.contract = contract

        errors = deliverable.validate(self.session)
        if errors:
            contract.deliverables.remove(deliverable)
            if deliverable in self.session:
                self.session.expunge(deliverable)
            raise RecordInvalidError(deliverable_class.__name__, errors)

        self.add(deliverable)
        self.flush()
        logger.info(f"Created {deliverable_type} {deliverable.id} on contract {contract_id}")
        return deliverable

    def update(self, deliverable_id: int, attributes: Dict) -> Deliverable:
        deliverable = self.get_or_raise(deliverable_id)
        deliverable.assign_attributes(attributes)
        ensure_valid(deliverable, self.session)
        self.flush()
        return deliverable

    def delete_deliverable(self, deliverable_id: int) -> None:
        """
        Delete a deliverable and its budgets.

        Raises:
            DeliverableNotFoundError: If deliverable not found
            ContractLockedError: If its contract is locked or closed
        """
        deliverable = self.get_or_raise(deliverable_id)
        ensure_deliverable_removable(deliverable)

        for issue in list(deliverable.issues):
            issue.deliverable = None
        self.delete(deliverable)
        logger.info(f"Deleted deliverable {deliverable_id}")
