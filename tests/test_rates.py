"""
Tests for user rates and the cost of a time entry.
"""
from datetime import date
from decimal import Decimal

import pytest

from billing_contracts.models import Issue, Project, Rate, TimeEntry


@pytest.fixture
def other_project(db):
    project = Project(name="Intranet", identifier="intranet")
    db.add(project)
    db.flush()
    return project


class TestRateFor:

    def test_project_rate_beats_default(self, db, project, manager):
        manager.rates.append(Rate(amount="80"))
        manager.rates.append(Rate(project_id=project.id, amount="120"))
        db.flush()

        assert manager.rate_for(project.id, date(2010, 2, 1)) == Decimal("120.00")

    def test_default_rate_on_other_projects(self, db, project, other_project, manager):
        manager.rates.append(Rate(amount="80"))
        manager.rates.append(Rate(project_id=project.id, amount="120"))
        db.flush()

        assert manager.rate_for(other_project.id, date(2010, 2, 1)) == Decimal("80.00")
        assert manager.rate_for(None, date(2010, 2, 1)) == Decimal("80.00")

    def test_latest_rate_in_effect_on_the_date(self, db, project, manager):
        manager.rates.append(Rate(project_id=project.id, amount="90", date_in_effect=date(2010, 1, 1)))
        manager.rates.append(Rate(project_id=project.id, amount="110", date_in_effect=date(2010, 3, 1)))
        db.flush()

        assert manager.rate_for(project.id, date(2010, 2, 28)) == Decimal("90.00")
        assert manager.rate_for(project.id, date(2010, 3, 1)) == Decimal("110.00")

    def test_future_rate_is_ignored(self, db, project, manager):
        manager.rates.append(Rate(project_id=project.id, amount="110", date_in_effect=date(2011, 1, 1)))
        db.flush()

        assert manager.rate_for(project.id, date(2010, 6, 1)) is None

    def test_undated_rate_applies_from_the_start(self, db, project, manager):
        manager.rates.append(Rate(project_id=project.id, amount="75"))
        manager.rates.append(Rate(project_id=project.id, amount="95", date_in_effect=date(2010, 6, 1)))
        db.flush()

        assert manager.rate_for(project.id, date(2010, 1, 1)) == Decimal("75.00")
        assert manager.rate_for(project.id, date(2010, 7, 1)) == Decimal("95.00")

    def test_no_rates(self, manager):
        assert manager.rate_for() is None


class TestTimeEntryCost:

    @pytest.fixture
    def make_entry(self, db, project, manager, billable_activity):
        def _make(hours, spent_on, issue_only=False):
            issue = Issue(project=project, subject="Homepage")
            entry = TimeEntry(
                project_id=None if issue_only else project.id,
                issue=issue,
                user=manager,
                activity=billable_activity,
                hours=hours,
                spent_on=spent_on,
            )
            db.add_all([issue, entry])
            db.flush()
            return entry
        return _make

    def test_hours_times_rate(self, db, project, manager, make_entry):
        manager.rates.append(Rate(project_id=project.id, amount="100"))
        db.flush()

        assert make_entry(2.5, date(2010, 2, 1)).cost == Decimal("250.00")

    def test_without_a_rate_cost_is_zero(self, make_entry):
        assert make_entry(3, date(2010, 2, 1)).cost == Decimal("0.00")

    def test_rate_change_mid_period(self, db, project, manager, make_entry):
        manager.rates.append(Rate(project_id=project.id, amount="100", date_in_effect=date(2010, 1, 1)))
        manager.rates.append(Rate(project_id=project.id, amount="150", date_in_effect=date(2010, 2, 15)))
        db.flush()

        before = make_entry(2, date(2010, 2, 14))
        after = make_entry(2, date(2010, 2, 15))

        assert before.cost == Decimal("200.00")
        assert after.cost == Decimal("300.00")

    def test_project_taken_from_issue(self, db, project, manager, make_entry):
        manager.rates.append(Rate(amount="50"))
        manager.rates.append(Rate(project_id=project.id, amount="100"))
        db.flush()

        assert make_entry(1, date(2010, 2, 1), issue_only=True).cost == Decimal("100.00")

    def test_zero_hours(self, db, project, manager, make_entry):
        manager.rates.append(Rate(project_id=project.id, amount="100"))
        db.flush()

        assert make_entry(0, date(2010, 2, 1)).cost == Decimal("0.00")

    def test_entry_belongs_to_project(self, db, project, make_entry):
        entry = make_entry(1, date(2010, 2, 1))
        db.expire(entry)

        assert entry.project is project
