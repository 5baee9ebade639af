"""
Contract Service - Status changes and totals for contracts.

Locking a contract freezes its list of deliverables: no deliverable can be
added to or removed from a locked or closed contract.
"""
import logging

from sqlalchemy.orm import Session

from billing_contracts.models import Contract
from billing_contracts.infrastructure.repositories import ContractRepository
from billing_contracts.domain.entities import ContractSummary

logger = logging.getLogger(__name__)

STATUS_ACTIONS = ("lock", "unlock", "close", "reopen")


class ContractService:
    """
    Service for contract lifecycle and reporting.

    Status moves:
    - lock: open -> locked
    - unlock: locked -> open
    - close: open or locked -> closed
    - reopen: closed -> open
    """

    def __init__(self, session: Session):
        self.session = session
        self.contract_repo = ContractRepository(session)

    def change_status(self, contract_id: int, action: str) -> Contract:
        """
        Apply a status action to a contract.

        Args:
            contract_id: Contract identifier
            action: One of lock, unlock, close, reopen

        Returns:
            The updated contract (flushed)

        Raises:
            ContractNotFoundError: If contract not found
            InvalidStatusTransitionError: If the move is not allowed
            ValueError: If the action is unknown
        """
        if action not in STATUS_ACTIONS:
            raise ValueError(f"Unknown contract action '{action}'")

        contract = self.contract_repo.get_or_raise(contract_id)
        getattr(contract, action)()
        self.session.flush()
        return contract

    def lock(self, contract_id: int) -> Contract:
        return self.change_status(contract_id, "lock")

    def unlock(self, contract_id: int) -> Contract:
        return self.change_status(contract_id, "unlock")

    def close(self, contract_id: int) -> Contract:
        return self.change_status(contract_id, "close")

    def reopen(self, contract_id: int) -> Contract:
        return self.change_status(contract_id, "reopen")

    def summary(self, contract_id: int) -> ContractSummary:
        """
        Build the totals of a contract.

        Args:
            contract_id: Contract identifier

        Returns:
            ContractSummary with total, discount and spend
        """
        contract = self.contract_repo.get_or_raise(contract_id)
        return ContractSummary(
            contract_id=contract.id,
            name=contract.name,
            status=contract.status,
            deliverable_count=len(contract.deliverables),
            total_amount=contract.total_amount(),
            discount_amount=contract.discount_amount(),
            total_spent=contract.total_spent(),
        )
