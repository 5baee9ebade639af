"""
Shared fixtures: an in-memory database per test plus factories for the
host data (projects, users, activities, issues and time entries).
"""
import os

os.environ.setdefault("BILLING_CONTRACTS_DATABASE_URL", "sqlite://")

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from billing_contracts.models import (
    Base, Contract, FixedDeliverable, Issue, IssueCategory, Project, Rate,
    RetainerDeliverable, TimeEntry, TimeEntryActivity, User
)


@pytest.fixture
def engine():
    """Fresh in-memory database shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def project(db):
    project = Project(name="Acme Website", identifier="acme-website")
    db.add(project)
    db.flush()
    return project


@pytest.fixture
def make_user(db):
    def _make(login, firstname="", lastname=""):
        user = User(login=login, firstname=firstname, lastname=lastname)
        db.add(user)
        db.flush()
        return user
    return _make


@pytest.fixture
def manager(make_user):
    return make_user("mmanager", "Mary", "Manager")


@pytest.fixture
def make_activity(db):
    def _make(name, billable, position=1):
        activity = TimeEntryActivity(
            name=name,
            position=position,
            active=True,
            custom_values={"billable": "true" if billable else "false"},
        )
        db.add(activity)
        db.flush()
        return activity
    return _make


@pytest.fixture
def billable_activity(make_activity):
    return make_activity("Development", billable=True, position=1)


@pytest.fixture
def non_billable_activity(make_activity):
    return make_activity("Project Management", billable=False, position=2)


@pytest.fixture
def make_contract(db, project, manager):
    def _make(**attributes):
        values = dict(
            name="Website Redesign",
            project=project,
            account_executive=manager,
            start_date=date(2010, 1, 1),
            end_date=date(2010, 12, 31),
            executed=True,
        )
        values.update(attributes)
        contract = Contract(**values)
        db.add(contract)
        db.flush()
        return contract
    return _make


@pytest.fixture
def contract(make_contract):
    return make_contract()


@pytest.fixture
def make_deliverable(db, contract, manager):
    def _make(deliverable_class=FixedDeliverable, **attributes):
        values = dict(title="Launch", manager=manager, contract=contract)
        values.update(attributes)
        deliverable = deliverable_class(**values)
        db.add(deliverable)
        db.flush()
        return deliverable
    return _make


@pytest.fixture
def deliverable(make_deliverable, billable_activity, non_billable_activity):
    """Three month retainer with a billable and a non-billable activity configured."""
    return make_deliverable(
        RetainerDeliverable,
        title="Monthly Support",
        start_date=date(2010, 1, 1),
        end_date=date(2010, 3, 31),
    )


@pytest.fixture
def make_category(db, project):
    def _make(name):
        category = IssueCategory(project=project, name=name)
        db.add(category)
        db.flush()
        return category
    return _make


@pytest.fixture
def log_time(db, project):
    """
    Create an issue on the deliverable with one time entry.

    When amount is given the user gets a project rate of that amount.
    """
    def _log(deliverable, activity, user, hours=1.0, amount=None, category=None,
             spent_on=date(2010, 2, 1)):
        if amount is not None and user.rate_for(project.id, spent_on) != amount:
            user.rates.append(Rate(project_id=project.id, amount=amount, date_in_effect=spent_on))

        issue = Issue(
            project=project,
            subject=f"{activity.name} for {user.login}",
            deliverable=deliverable,
            category=category,
        )
        entry = TimeEntry(
            project_id=project.id,
            issue=issue,
            user=user,
            activity=activity,
            hours=hours,
            spent_on=spent_on,
        )
        db.add(issue)
        db.add(entry)
        db.flush()
        return entry
    return _log
