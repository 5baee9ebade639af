"""
Budget Repository - Data access layer for Budget entities.

Budgets plan cost and hours on a deliverable:
- LaborBudget / OverheadBudget per time entry activity
- FixedBudget for one-off expenses with markup
"""
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from billing_contracts.models import (
    Budget,
    Deliverable,
    FixedBudget,
    LaborBudget,
    OverheadBudget,
)
from billing_contracts.domain.exceptions import (
    BudgetNotFoundError,
    DeliverableNotFoundError,
    RecordInvalidError,
)
from billing_contracts.domain.events.handlers import ensure_valid
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

BUDGET_TYPES = {
    "LaborBudget": LaborBudget,
    "OverheadBudget": OverheadBudget,
    "FixedBudget": FixedBudget,
}


class BudgetRepository(BaseRepository[Budget]):
    """Repository for Budget entities of every type."""

    def __init__(self, session: Session):
        super().__init__(session, Budget)

    def get_or_raise(self, budget_id: int) -> Budget:
        budget = self.get_by_id(budget_id)
        if not budget:
            raise BudgetNotFoundError(budget_id)
        return budget

    def get_by_deliverable(self, deliverable_id: int) -> List[Budget]:
        """
        Get all budgets of a deliverable.

        Args:
            deliverable_id: Parent deliverable identifier

        Returns:
            List of budgets of every type ordered by id
        """
        return self.session.query(Budget).filter(
            Budget.deliverable_id == deliverable_id
        ).order_by(Budget.id).all()

    def get_by_activity(self, activity_id: int) -> List[Budget]:
        return self.session.query(Budget).filter(
            Budget.time_entry_activity_id == activity_id
        ).order_by(Budget.id).all()

    def create(self, deliverable_id: int, budget_type: str, attributes: Dict) -> Budget:
        """
        Create a budget on a deliverable.

        Args:
            deliverable_id: Parent deliverable identifier
            budget_type: LaborBudget, OverheadBudget or FixedBudget
            attributes: Budget fields (budget, hours, time_entry_activity_id, title, markup, paid)

        Returns:
            Created budget (flushed, so validation has run)

        Raises:
            DeliverableNotFoundError: If deliverable not found
            RecordInvalidError: If the type is unknown or the budget is invalid
        """
        deliverable = self.session.query(Deliverable).filter(
            Deliverable.id == deliverable_id
        ).first()
        if not deliverable:
            raise DeliverableNotFoundError(deliverable_id)

        budget_class = BUDGET_TYPES.get(budget_type)
        if budget_class is None:
            raise RecordInvalidError("Budget", {"type": ["is not included in the list"]})

        budget = budget_class()
        budget.assign_attributes(attributes)
        budget.deliverable_id = deliverable.id

        errors = budget.validate(self.session)
        if errors:
            raise RecordInvalidError(budget_class.__name__, errors)

        deliverable.budgets.append(budget)

        self.flush()
        logger.info(f"Created {budget_type} {budget.id} on deliverable {deliverable_id}")
        return budget

    def update(self, budget_id: int, attributes: Dict) -> Budget:
        budget = self.get_or_raise(budget_id)
        budget.assign_attributes(attributes)
        ensure_valid(budget, self.session)
        self.flush()
        return budget

    def delete_budget(self, budget_id: int) -> None:
        """
        Delete a budget.

        Raises:
            BudgetNotFoundError: If budget not found
        """
        budget = self.get_or_raise(budget_id)
        if budget.deliverable is not None:
            # delete-orphan cascade removes the row
            budget.deliverable.budgets.remove(budget)
        else:
            self.delete(budget)
        self.flush()
        logger.info(f"Deleted budget {budget_id}")
