"""
Report entities - spent vs. budgeted summaries of deliverables and contracts.

Plain dataclasses, so reports can be built in services and serialized
for the API and CLI without touching the session again.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from billing_contracts.domain.formatting import ZERO


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass
class ActivityLine:
    """Budget and spend for one time entry activity."""

    activity_id: int
    name: str
    billable: bool
    budget: Decimal = ZERO
    spent: Decimal = ZERO
    hours_budget: float = 0.0
    hours_spent: float = 0.0

    def remaining(self) -> Decimal:
        return self.budget - self.spent

    def hours_remaining(self) -> float:
        return self.hours_budget - self.hours_spent

    def to_dict(self) -> dict:
        return {
            'activity_id': self.activity_id,
            'name': self.name,
            'billable': self.billable,
            'budget': _money(self.budget),
            'spent': _money(self.spent),
            'remaining': _money(self.remaining()),
            'hours_budget': self.hours_budget,
            'hours_spent': self.hours_spent,
            'hours_remaining': self.hours_remaining(),
        }


@dataclass
class SpendLine:
    """Billable and non-billable spend grouped by a user or an issue category."""

    key_id: int
    name: str
    billable_hours: float = 0.0
    billable_spent: Decimal = ZERO
    non_billable_hours: float = 0.0
    non_billable_spent: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            'id': self.key_id,
            'name': self.name,
            'billable_hours': self.billable_hours,
            'billable_spent': _money(self.billable_spent),
            'non_billable_hours': self.non_billable_hours,
            'non_billable_spent': _money(self.non_billable_spent),
        }


@dataclass
class DeliverableReport:
    """
    Spent vs. budgeted summary of a deliverable.

    Attributes:
        deliverable_id: Deliverable identifier
        title: Deliverable title
        type: Deliverable type (FixedDeliverable, HourlyDeliverable, RetainerDeliverable)
        status: open, locked or closed
        months: Number of billed months (retainers), otherwise 1
        total: Current total billed for the deliverable
        activities: One line per billable and non-billable activity
        users: One line per user with logged time
        issue_categories: One line per issue category with logged time
    """

    deliverable_id: int
    title: str
    type: str
    status: Optional[str]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    months: int = 1
    total: Decimal = ZERO
    labor_budget: Decimal = ZERO
    overhead_budget: Decimal = ZERO
    fixed_budget: Decimal = ZERO
    labor_spent: Decimal = ZERO
    overhead_spent: Decimal = ZERO
    fixed_spent: Decimal = ZERO
    activities: List[ActivityLine] = field(default_factory=list)
    users: List[SpendLine] = field(default_factory=list)
    issue_categories: List[SpendLine] = field(default_factory=list)

    def total_budget(self) -> Decimal:
        return self.labor_budget + self.overhead_budget + self.fixed_budget

    def total_spent(self) -> Decimal:
        return self.labor_spent + self.overhead_spent + self.fixed_spent

    def profit_left(self) -> Decimal:
        return self.total - self.total_spent()

    def profit_budget(self) -> Decimal:
        return self.total - self.total_budget()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'deliverable_id': self.deliverable_id,
            'title': self.title,
            'type': self.type,
            'status': self.status,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'months': self.months,
            'total': _money(self.total),
            'labor_budget': _money(self.labor_budget),
            'overhead_budget': _money(self.overhead_budget),
            'fixed_budget': _money(self.fixed_budget),
            'total_budget': _money(self.total_budget()),
            'labor_spent': _money(self.labor_spent),
            'overhead_spent': _money(self.overhead_spent),
            'fixed_spent': _money(self.fixed_spent),
            'total_spent': _money(self.total_spent()),
            'profit_left': _money(self.profit_left()),
            'profit_budget': _money(self.profit_budget()),
            'activities': [line.to_dict() for line in self.activities],
            'users': [line.to_dict() for line in self.users],
            'issue_categories': [line.to_dict() for line in self.issue_categories],
        }


@dataclass
class ContractSummary:
    """Totals of a contract across its deliverables."""

    contract_id: int
    name: str
    status: str
    deliverable_count: int = 0
    total_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total_spent: Decimal = ZERO

    def total_after_discount(self) -> Decimal:
        return self.total_amount - self.discount_amount

    def amount_remaining(self) -> Decimal:
        return self.total_after_discount() - self.total_spent

    def to_dict(self) -> dict:
        return {
            'contract_id': self.contract_id,
            'name': self.name,
            'status': self.status,
            'deliverable_count': self.deliverable_count,
            'total_amount': _money(self.total_amount),
            'discount_amount': _money(self.discount_amount),
            'total_after_discount': _money(self.total_after_discount()),
            'total_spent': _money(self.total_spent),
            'amount_remaining': _money(self.amount_remaining()),
        }
