"""
Deliverable Report Service - Spent vs. budgeted breakdown of a deliverable.

Groups the deliverable's time entries three ways:
- by time entry activity (with the matching labor/overhead budget)
- by user (billable and non-billable)
- by issue category (billable and non-billable)
"""
from typing import List

from sqlalchemy.orm import Session

from billing_contracts.models import Deliverable
from billing_contracts.infrastructure.repositories import DeliverableRepository
from billing_contracts.domain.entities import ActivityLine, DeliverableReport, SpendLine


class DeliverableReportService:
    """Builds DeliverableReport objects from a deliverable's aggregate queries."""

    def __init__(self, session: Session):
        self.session = session
        self.deliverable_repo = DeliverableRepository(session)

    def build(self, deliverable_id: int) -> DeliverableReport:
        """
        Build the report for a deliverable.

        Args:
            deliverable_id: Deliverable identifier

        Returns:
            DeliverableReport

        Raises:
            DeliverableNotFoundError: If deliverable not found
        """
        deliverable = self.deliverable_repo.get_or_raise(deliverable_id)

        return DeliverableReport(
            deliverable_id=deliverable.id,
            title=deliverable.title,
            type=deliverable.type,
            status=deliverable.status,
            start_date=deliverable.start_date,
            end_date=deliverable.end_date,
            months=deliverable.budget_multiplier(),
            total=deliverable.current_total(),
            labor_budget=deliverable.labor_budget_total(),
            overhead_budget=deliverable.overhead_budget_total(),
            fixed_budget=deliverable.fixed_budget_total(),
            labor_spent=deliverable.labor_spent(),
            overhead_spent=deliverable.overhead_spent(),
            fixed_spent=deliverable.fixed_spent(),
            activities=self._activity_lines(deliverable),
            users=self._user_lines(deliverable),
            issue_categories=self._category_lines(deliverable),
        )

    def _activity_lines(self, deliverable: Deliverable) -> List[ActivityLine]:
        activities = (
            deliverable.billable_time_entry_activities()
            + deliverable.non_billable_time_entry_activities()
        )
        return [
            ActivityLine(
                activity_id=activity.id,
                name=activity.name,
                billable=activity.is_billable,
                budget=deliverable.budget_for_activity(activity),
                spent=deliverable.spent_for_activity(activity),
                hours_budget=deliverable.hours_budget_for_activity(activity),
                hours_spent=deliverable.hours_spent_for_activity(activity),
            )
            for activity in activities
        ]

    def _user_lines(self, deliverable: Deliverable) -> List[SpendLine]:
        users = {}
        for user in deliverable.users_with_billable_time() + deliverable.users_with_non_billable_time():
            users.setdefault(user.id, user)

        return [
            SpendLine(
                key_id=user.id,
                name=user.name,
                billable_hours=deliverable.hours_spent_for_user(user, billable=True),
                billable_spent=deliverable.spent_for_user(user, billable=True),
                non_billable_hours=deliverable.hours_spent_for_user(user, billable=False),
                non_billable_spent=deliverable.spent_for_user(user, billable=False),
            )
            for user in users.values()
        ]

    def _category_lines(self, deliverable: Deliverable) -> List[SpendLine]:
        categories = {}
        for category in (
            deliverable.issue_categories_with_billable_time()
            + deliverable.issue_categories_with_non_billable_time()
        ):
            categories.setdefault(category.id, category)

        return [
            SpendLine(
                key_id=category.id,
                name=category.name,
                billable_hours=deliverable.hours_spent_for_issue_category(category, billable=True),
                billable_spent=deliverable.spent_for_issue_category(category, billable=True),
                non_billable_hours=deliverable.hours_spent_for_issue_category(category, billable=False),
                non_billable_spent=deliverable.spent_for_issue_category(category, billable=False),
            )
            for category in categories.values()
        ]
