"""
Domain Event Handlers for contract billing.

Implements SQLAlchemy event listeners for:
- Validation of contracts, deliverables and budgets on flush
- Blocking deliverable deletes on locked or closed contracts

These handlers ensure business rules are enforced at the ORM level, so a
record written outside the repositories is held to the same rules.
"""
import logging

from sqlalchemy import event

from billing_contracts.models import Budget, Contract, Deliverable
from billing_contracts.domain.exceptions import ContractLockedError, RecordInvalidError

logger = logging.getLogger(__name__)


def ensure_valid(target, session=None) -> None:
    """
    Raise RecordInvalidError when the target fails validation.

    Pass the session to also check that foreign keys resolve to rows; the
    flush listeners validate without one.
    """
    errors = target.validate(session)
    if errors:
        raise RecordInvalidError(type(target).__name__, errors)


def ensure_deliverable_removable(deliverable) -> None:
    """Raise ContractLockedError if the deliverable's contract is locked or closed."""
    contract = deliverable.contract
    if contract is not None and (contract.is_locked or contract.is_closed):
        raise ContractLockedError(contract.id, contract.status)


# =============================================================================
# Contract Event Handlers
# =============================================================================

@event.listens_for(Contract, 'before_insert')
@event.listens_for(Contract, 'before_update')
def contract_before_save(mapper, connection, target):
    ensure_valid(target)


# =============================================================================
# Deliverable Event Handlers
# =============================================================================

@event.listens_for(Deliverable, 'before_insert', propagate=True)
@event.listens_for(Deliverable, 'before_update', propagate=True)
def deliverable_before_save(mapper, connection, target):
    ensure_valid(target)


@event.listens_for(Deliverable, 'before_delete', propagate=True)
def deliverable_before_delete(mapper, connection, target):
    """Deliverables of locked or closed contracts cannot be deleted."""
    ensure_deliverable_removable(target)


# =============================================================================
# Budget Event Handlers
# =============================================================================

@event.listens_for(Budget, 'before_insert', propagate=True)
@event.listens_for(Budget, 'before_update', propagate=True)
def budget_before_save(mapper, connection, target):
    ensure_valid(target)
