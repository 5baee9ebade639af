"""
Domain Exceptions for contract billing.

Custom exceptions enforcing business rules:
- Record validation
- Contract locking
- Status transitions
"""
from typing import Dict, List


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Lookup Exceptions
# =============================================================================

class ProjectNotFoundError(DomainError):
    """Raised when a host project cannot be found."""

    def __init__(self, project_id):
        message = f"Project with id '{project_id}' not found"
        super().__init__(message, code="PROJECT_NOT_FOUND")
        self.project_id = project_id


class ContractNotFoundError(DomainError):
    """Raised when a contract cannot be found."""

    def __init__(self, contract_id):
        message = f"Contract with id '{contract_id}' not found"
        super().__init__(message, code="CONTRACT_NOT_FOUND")
        self.contract_id = contract_id


class DeliverableNotFoundError(DomainError):
    """Raised when a deliverable cannot be found."""

    def __init__(self, deliverable_id):
        message = f"Deliverable with id '{deliverable_id}' not found"
        super().__init__(message, code="DELIVERABLE_NOT_FOUND")
        self.deliverable_id = deliverable_id


class BudgetNotFoundError(DomainError):
    """Raised when a budget cannot be found."""

    def __init__(self, budget_id):
        message = f"Budget with id '{budget_id}' not found"
        super().__init__(message, code="BUDGET_NOT_FOUND")
        self.budget_id = budget_id


# =============================================================================
# Validation Exceptions
# =============================================================================

class RecordInvalidError(DomainError):
    """Raised when a record fails validation on save."""

    def __init__(self, entity_type: str, errors: Dict[str, List[str]]):
        details = "; ".join(
            message if field == "base" else f"{field} {message}"
            for field, messages in errors.items()
            for message in messages
        )
        super().__init__(f"{entity_type} is invalid: {details}", code="RECORD_INVALID")
        self.entity_type = entity_type
        self.errors = errors


# =============================================================================
# Locking Exceptions
# =============================================================================

class ContractLockedError(DomainError):
    """Raised when a change is blocked by a locked or closed contract."""

    def __init__(self, contract_id, status: str, action: str = "delete a deliverable"):
        if action == "delete":
            message = f"Can't delete a {status} contract"
        else:
            message = f"Can't {action} on a {status} contract"
        super().__init__(message, code="CONTRACT_LOCKED")
        self.contract_id = contract_id
        self.status = status
        self.action = action


class InvalidStatusTransitionError(DomainError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, entity_type: str, from_status: str, to_status: str):
        message = f"{entity_type} cannot move from '{from_status}' to '{to_status}'"
        super().__init__(message, code="INVALID_STATUS_TRANSITION")
        self.entity_type = entity_type
        self.from_status = from_status
        self.to_status = to_status
