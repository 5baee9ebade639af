"""
Tests for deliverables: validation, locking, totals and the spent vs.
budgeted queries by activity, user and issue category.
"""
from datetime import date
from decimal import Decimal

import pytest

from billing_contracts.config import ContractsConfig
from billing_contracts.models import (
    Deliverable, FixedDeliverable, HourlyDeliverable, RetainerDeliverable,
    FixedBudget, IssueCategory, LaborBudget, OverheadBudget, TimeEntryActivity, User
)
from billing_contracts.domain.exceptions import ContractLockedError
from billing_contracts.infrastructure.repositories import DeliverableRepository

STATUS_ACTIONS = {"locked": "lock", "closed": "close"}


class TestDeliverableValidation:

    @pytest.mark.parametrize("field", ["title", "manager"])
    def test_requires_field(self, field):
        assert "can't be blank" in FixedDeliverable().validate()[field]

    def test_requires_type(self):
        assert "can't be blank" in Deliverable().validate()["type"]

    def test_subclass_sets_type(self):
        assert FixedDeliverable().type == "FixedDeliverable"
        assert HourlyDeliverable().type == "HourlyDeliverable"
        assert RetainerDeliverable().type == "RetainerDeliverable"

    @pytest.mark.parametrize("value", ["", None, "open", "locked", "closed"])
    def test_allows_status(self, value):
        deliverable = FixedDeliverable()
        deliverable.status = value
        assert "status" not in deliverable.validate()

    @pytest.mark.parametrize("value", ["other", "things", "1"])
    def test_rejects_status(self, value):
        deliverable = FixedDeliverable()
        deliverable.status = value
        assert deliverable.validate()["status"] == ["is not included in the list"]

    def test_default_status_to_open(self):
        assert Deliverable().status == "open"


class TestDeliverableTotal:

    def test_strips_dollar_signs(self):
        deliverable = Deliverable()
        deliverable.total = "$100.00"
        assert deliverable.total == Decimal("100.00")

    def test_strips_commas(self):
        deliverable = Deliverable()
        deliverable.total = "20,100.00"
        assert deliverable.total == Decimal("20100.00")

    def test_strips_spaces(self):
        deliverable = Deliverable()
        deliverable.total = "20 100.00"
        assert deliverable.total == Decimal("20100.00")

    def test_stored_as_cents(self):
        deliverable = Deliverable()
        deliverable.total = "$20,100.00"
        assert deliverable.total_cents == 2010000

    def test_blank_clears_total(self):
        deliverable = Deliverable(total="100")
        deliverable.total = ""
        assert deliverable.total is None
        assert deliverable.current_total() == Decimal("0.00")


@pytest.mark.parametrize("contract_status", ["locked", "closed"])
class TestDeliverableOnLockedContract:

    def test_blocks_creating_a_deliverable(self, make_contract, manager, contract_status):
        contract = make_contract(status=contract_status)
        deliverable = FixedDeliverable(title="Extra", manager=manager, contract=contract)

        assert not deliverable.is_valid()
        assert (
            f"Can't create a deliverable on a {contract_status} contract"
            in deliverable.validate()["base"]
        )

    def test_allows_updating_existing_deliverable(self, db, make_deliverable, contract, contract_status):
        deliverable = make_deliverable()
        getattr(contract, STATUS_ACTIONS[contract_status])()
        db.flush()

        deliverable.notes = "Signed off"
        db.flush()

        assert deliverable.is_valid()

    def test_blocks_deleting_a_deliverable(self, db, make_deliverable, contract, contract_status):
        deliverable = make_deliverable()
        getattr(contract, STATUS_ACTIONS[contract_status])()
        db.commit()

        assert deliverable.contract.status == contract_status
        db.delete(deliverable)
        with pytest.raises(ContractLockedError):
            db.flush()
        db.rollback()

        assert db.query(Deliverable).count() == 1

    def test_repository_refuses_delete(self, db, make_deliverable, contract, contract_status):
        deliverable = make_deliverable()
        getattr(contract, STATUS_ACTIONS[contract_status])()
        db.flush()

        with pytest.raises(ContractLockedError) as exc_info:
            DeliverableRepository(db).delete_deliverable(deliverable.id)

        assert exc_info.value.message == f"Can't delete a deliverable on a {contract_status} contract"
        assert db.query(Deliverable).count() == 1


class TestDeliverableDelete:

    def test_deletes_budgets_and_unlinks_issues(
        self, db, deliverable, billable_activity, manager, log_time
    ):
        deliverable.budgets.append(
            LaborBudget(budget=100, hours=10, time_entry_activity=billable_activity)
        )
        entry = log_time(deliverable, billable_activity, manager)
        db.flush()

        DeliverableRepository(db).delete_deliverable(deliverable.id)
        db.flush()

        assert db.query(Deliverable).count() == 0
        assert db.query(LaborBudget).count() == 0
        assert entry.issue.deliverable_id is None


class TestBillableActivities:

    def test_includes_all_billable_activities(
        self, deliverable, billable_activity, make_activity
    ):
        second = make_activity("Design", billable=True, position=3)

        activities = deliverable.billable_time_entry_activities()

        assert billable_activity in activities
        assert second in activities

    def test_excludes_non_billable_activities(self, deliverable, non_billable_activity):
        assert non_billable_activity not in deliverable.billable_time_entry_activities()

    def test_non_billable_includes_all_non_billable_activities(
        self, deliverable, non_billable_activity, make_activity
    ):
        second = make_activity("Sales", billable=False, position=4)

        activities = deliverable.non_billable_time_entry_activities()

        assert non_billable_activity in activities
        assert second in activities

    def test_non_billable_excludes_billable_activities(self, deliverable, billable_activity):
        assert billable_activity not in deliverable.non_billable_time_entry_activities()

    def test_activity_without_custom_value_is_non_billable(self, db, deliverable, make_activity):
        bare = make_activity("Meetings", billable=False, position=5)
        bare.custom_values = {}
        db.flush()

        assert bare in deliverable.non_billable_time_entry_activities()

    def test_inactive_activities_are_skipped(self, db, deliverable, billable_activity):
        billable_activity.active = False
        db.flush()

        assert billable_activity not in deliverable.billable_time_entry_activities()

    def test_inactive_activity_with_time_is_listed(
        self, db, deliverable, billable_activity, manager, log_time
    ):
        log_time(deliverable, billable_activity, manager, hours=2, amount=100)
        billable_activity.active = False
        db.flush()

        assert billable_activity in deliverable.billable_time_entry_activities()
        assert billable_activity not in deliverable.non_billable_time_entry_activities()

    def test_activity_spend_adds_up_to_labor_and_overhead(
        self, db, deliverable, billable_activity, non_billable_activity, manager, log_time
    ):
        log_time(deliverable, billable_activity, manager, hours=2, amount=100)
        log_time(deliverable, non_billable_activity, manager, hours=1, amount=100)
        non_billable_activity.active = False
        db.flush()

        activities = (deliverable.billable_time_entry_activities()
                      + deliverable.non_billable_time_entry_activities())
        spent = sum(deliverable.spent_for_activity(a) for a in activities)

        assert spent == deliverable.labor_spent() + deliverable.overhead_spent()
        assert spent == Decimal("300.00")


class TestActivityQueries:

    def test_spent_for_activity(self, deliverable, billable_activity, manager, log_time):
        log_time(deliverable, billable_activity, manager, hours=5, amount=100)

        assert deliverable.spent_for_activity(billable_activity) == Decimal("500.00")

    def test_hours_spent_for_activity(self, deliverable, billable_activity, manager, log_time):
        log_time(deliverable, billable_activity, manager, hours=5, amount=100)

        assert deliverable.hours_spent_for_activity(billable_activity) == 5.0

    def test_budget_for_activity_on_retainer(self, db, deliverable, billable_activity):
        deliverable.budgets.append(LaborBudget(budget=100, hours=10, time_entry_activity=billable_activity))
        deliverable.budgets.append(LaborBudget(budget=100, hours=10, time_entry_activity=billable_activity))
        db.flush()

        # 200 a month for 3 months
        assert deliverable.budget_for_activity(billable_activity) == Decimal("600.00")

    def test_hours_budget_for_activity_on_retainer(self, db, deliverable, billable_activity):
        deliverable.budgets.append(LaborBudget(budget=100, hours=10, time_entry_activity=billable_activity))
        deliverable.budgets.append(LaborBudget(budget=100, hours=10, time_entry_activity=billable_activity))
        db.flush()

        assert deliverable.hours_budget_for_activity(billable_activity) == 60.0

    def test_budget_for_activity_includes_overhead(
        self, db, make_deliverable, non_billable_activity
    ):
        fixed = make_deliverable(FixedDeliverable)
        fixed.budgets.append(
            OverheadBudget(budget="250", hours=5, time_entry_activity=non_billable_activity)
        )
        db.flush()

        assert fixed.budget_for_activity(non_billable_activity) == Decimal("250.00")
        assert fixed.hours_budget_for_activity(non_billable_activity) == 5.0

    def test_budget_for_other_activity_is_zero(self, db, deliverable, billable_activity, non_billable_activity):
        deliverable.budgets.append(LaborBudget(budget=100, hours=10, time_entry_activity=billable_activity))
        db.flush()

        assert deliverable.budget_for_activity(non_billable_activity) == Decimal("0.00")


class TestRecordsFromAnotherSession:
    """Activities, users and categories are matched by id, not by instance."""

    @pytest.fixture
    def fixed(self, db, make_deliverable, billable_activity, manager, make_category, log_time):
        fixed = make_deliverable(FixedDeliverable)
        category = make_category("Front end")
        log_time(fixed, billable_activity, manager, hours=5, amount=100, category=category)
        fixed.budgets.append(LaborBudget(budget=250, hours=3, time_entry_activity=billable_activity))
        db.commit()
        return fixed

    @pytest.fixture
    def other_db(self, session_factory):
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def test_spent_for_activity(self, fixed, billable_activity, other_db):
        activity = other_db.get(TimeEntryActivity, billable_activity.id)

        assert activity is not billable_activity
        assert fixed.spent_for_activity(activity) == Decimal("500.00")
        assert fixed.hours_spent_for_activity(activity) == 5.0
        assert fixed.budget_for_activity(activity) == Decimal("250.00")

    def test_spent_for_user(self, fixed, manager, other_db):
        user = other_db.get(User, manager.id)

        assert fixed.hours_spent_for_user(user) == 5.0
        assert fixed.spent_for_user(user) == Decimal("500.00")

    def test_spent_for_issue_category(self, fixed, other_db):
        [category] = fixed.issue_categories_with_billable_time()
        other = other_db.get(IssueCategory, category.id)

        assert fixed.spent_for_issue_category(other) == Decimal("500.00")
        assert fixed.hours_spent_for_issue_category(other) == 5.0

    def test_users_are_distinct_by_id(self, fixed, billable_activity, manager, log_time):
        log_time(fixed, billable_activity, manager, hours=1)

        assert fixed.users_with_billable_time() == [manager]

class TestUsersWithTime:

    @pytest.fixture
    def logged(self, deliverable, billable_activity, non_billable_activity,
               manager, make_user, log_time):
        log_time(deliverable, billable_activity, manager)
        log_time(deliverable, non_billable_activity, manager)
        non_billable_user = make_user("nbuser")
        log_time(deliverable, non_billable_activity, non_billable_user)
        billable_user = make_user("buser")
        log_time(deliverable, billable_activity, billable_user)
        return non_billable_user, billable_user

    def test_billable_includes_users_with_billable_time(self, deliverable, manager, logged):
        assert manager in deliverable.users_with_billable_time()

    def test_billable_excludes_users_with_only_non_billable_time(self, deliverable, logged):
        non_billable_user, _ = logged
        assert non_billable_user not in deliverable.users_with_billable_time()

    def test_non_billable_includes_users_with_non_billable_time(self, deliverable, manager, logged):
        assert manager in deliverable.users_with_non_billable_time()

    def test_non_billable_excludes_users_with_only_billable_time(self, deliverable, logged):
        _, billable_user = logged
        assert billable_user not in deliverable.users_with_non_billable_time()

    def test_users_are_distinct(self, deliverable, billable_activity, manager, log_time, logged):
        log_time(deliverable, billable_activity, manager)
        assert deliverable.users_with_billable_time().count(manager) == 1


class TestSpendForUser:

    @pytest.fixture(autouse=True)
    def logged(self, deliverable, billable_activity, non_billable_activity, manager, log_time):
        log_time(deliverable, billable_activity, manager, hours=5, amount=100)
        log_time(deliverable, billable_activity, manager, hours=5, amount=100)
        log_time(deliverable, non_billable_activity, manager, hours=5, amount=100)

    def test_hours_spent_for_user_billable(self, deliverable, manager):
        assert deliverable.hours_spent_for_user(manager, True) == 10

    def test_hours_spent_for_user_non_billable(self, deliverable, manager):
        assert deliverable.hours_spent_for_user(manager, False) == 5

    def test_spent_for_user_billable(self, deliverable, manager):
        assert deliverable.spent_for_user(manager, True) == 1000

    def test_spent_for_user_non_billable(self, deliverable, manager):
        assert deliverable.spent_for_user(manager, False) == 500

    def test_user_without_time(self, deliverable, make_user):
        assert deliverable.spent_for_user(make_user("idle")) == 0


class TestIssueCategoriesWithTime:

    @pytest.fixture
    def categories(self, make_category):
        return make_category("Front end"), make_category("Back end")

    def test_billable_includes_categories_with_billable_time(
        self, deliverable, categories, billable_activity, non_billable_activity, manager, log_time
    ):
        one, two = categories
        log_time(deliverable, billable_activity, manager, category=one)
        log_time(deliverable, non_billable_activity, manager, category=one)
        log_time(deliverable, non_billable_activity, manager, category=two)

        assert one in deliverable.issue_categories_with_billable_time()
        assert two not in deliverable.issue_categories_with_billable_time()

    def test_non_billable_includes_categories_with_non_billable_time(
        self, deliverable, categories, billable_activity, non_billable_activity, manager, log_time
    ):
        one, two = categories
        log_time(deliverable, non_billable_activity, manager, category=one)
        log_time(deliverable, billable_activity, manager, category=one)
        log_time(deliverable, billable_activity, manager, category=two)

        assert one in deliverable.issue_categories_with_non_billable_time()
        assert two not in deliverable.issue_categories_with_non_billable_time()

    def test_uncategorized_time_is_skipped(self, deliverable, billable_activity, manager, log_time):
        log_time(deliverable, billable_activity, manager)
        assert deliverable.issue_categories_with_billable_time() == []


class TestSpendForIssueCategory:

    @pytest.fixture
    def category(self, deliverable, make_category, billable_activity,
                 non_billable_activity, manager, log_time):
        category = make_category("Front end")
        log_time(deliverable, billable_activity, manager, hours=5, amount=100, category=category)
        log_time(deliverable, billable_activity, manager, hours=5, amount=100, category=category)
        log_time(deliverable, non_billable_activity, manager, hours=5, amount=100, category=category)
        return category

    def test_spent_for_issue_category_billable(self, deliverable, category):
        assert deliverable.spent_for_issue_category(category, True) == 1000

    def test_spent_for_issue_category_non_billable(self, deliverable, category):
        assert deliverable.spent_for_issue_category(category, False) == 500

    def test_hours_spent_for_issue_category_billable(self, deliverable, category):
        assert deliverable.hours_spent_for_issue_category(category, True) == 10

    def test_hours_spent_for_issue_category_non_billable(self, deliverable, category):
        assert deliverable.hours_spent_for_issue_category(category, False) == 5


class TestRetainerMonths:

    def test_months_touched(self):
        retainer = RetainerDeliverable(start_date=date(2010, 1, 15), end_date=date(2010, 3, 10))

        assert retainer.months() == [date(2010, 1, 1), date(2010, 2, 1), date(2010, 3, 1)]
        assert retainer.budget_multiplier() == 3

    def test_months_across_year_end(self):
        retainer = RetainerDeliverable(start_date=date(2010, 11, 1), end_date=date(2011, 2, 28))
        assert retainer.budget_multiplier() == 4

    def test_missing_dates_have_no_months(self):
        assert RetainerDeliverable(start_date=date(2010, 1, 1)).months() == []
        assert RetainerDeliverable(start_date=date(2010, 3, 1), end_date=date(2010, 1, 1)).months() == []

    def test_partial_months_can_be_dropped(self, tmp_path, monkeypatch):
        config_file = tmp_path / "contracts.yaml"
        config_file.write_text("retainer:\n  count_partial_months: false\n")
        config = ContractsConfig(config_file)
        monkeypatch.setattr("billing_contracts.models.get_config", lambda: config)

        retainer = RetainerDeliverable(start_date=date(2010, 1, 15), end_date=date(2010, 4, 10))

        assert retainer.months() == [date(2010, 2, 1), date(2010, 3, 1)]

    def test_fixed_budgets_are_not_multiplied(self, db, deliverable):
        deliverable.budgets.append(FixedBudget(title="Hosting", budget="300"))
        db.flush()

        assert deliverable.fixed_budget_total() == Decimal("300.00")


class TestDeliverableTotals:

    def test_fixed_deliverable_profit(
        self, db, make_deliverable, billable_activity, non_billable_activity, manager, log_time
    ):
        fixed = make_deliverable(FixedDeliverable, total="$2,000.00")
        fixed.budgets.append(LaborBudget(budget="800", hours=8, time_entry_activity=billable_activity))
        fixed.budgets.append(OverheadBudget(budget="200", hours=2, time_entry_activity=non_billable_activity))
        fixed.budgets.append(FixedBudget(title="License", budget="100", markup="10%", paid=True))
        log_time(fixed, billable_activity, manager, hours=4, amount=100)
        log_time(fixed, non_billable_activity, manager, hours=1, amount=100)
        db.flush()

        assert fixed.labor_spent() == Decimal("400.00")
        assert fixed.overhead_spent() == Decimal("100.00")
        assert fixed.fixed_spent() == Decimal("110.00")
        assert fixed.total_spent() == Decimal("610.00")
        assert fixed.profit_left() == Decimal("1390.00")
        assert fixed.profit_budget() == Decimal("890.00")

    def test_budget_totals_on_retainer(
        self, db, deliverable, billable_activity, non_billable_activity
    ):
        deliverable.budgets.append(LaborBudget(budget="100", hours=10, time_entry_activity=billable_activity))
        deliverable.budgets.append(OverheadBudget(budget="50", hours=2, time_entry_activity=non_billable_activity))
        db.flush()

        assert deliverable.labor_budget_total() == Decimal("300.00")
        assert deliverable.overhead_budget_total() == Decimal("150.00")
        assert deliverable.labor_hours_budget_total() == 30.0
        assert deliverable.overhead_hours_budget_total() == 6.0

    def test_type_flags(self):
        assert FixedDeliverable().is_fixed
        assert HourlyDeliverable().is_hourly
        assert RetainerDeliverable().is_retainer
        assert not RetainerDeliverable().is_fixed
