"""
Database models and SQLAlchemy setup for the billing contracts plugin.
All monetary values stored as integer cents to avoid float drift.

Host application tables (projects, users, rates, issues, time entries) are
modelled only as far as the contract/deliverable aggregation queries read
them.
"""
import calendar
import logging
import os
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterator, List, Optional

from sqlalchemy import (
    create_engine, Column, Integer, String, Float, Boolean,
    DateTime, Date, Text, ForeignKey, JSON
)
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import declarative_base, sessionmaker, relationship, object_session

from billing_contracts.config import get_config
from billing_contracts.domain.exceptions import InvalidStatusTransitionError
from billing_contracts.domain.formatting import (
    ZERO, money_property, quantize_money, unformat_currency
)
from billing_contracts.domain import validation

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("BILLING_CONTRACTS_DATABASE_URL") or get_config().database_url
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


OPEN = "open"
LOCKED = "locked"
CLOSED = "closed"


# =============================================================================
# Shared Behaviour
# =============================================================================

class StatusMixin:
    """open -> locked -> open, open/locked -> closed -> open."""

    TRANSITIONS = {
        "lock": ((OPEN,), LOCKED),
        "unlock": ((LOCKED,), OPEN),
        "close": ((OPEN, LOCKED), CLOSED),
        "reopen": ((CLOSED,), OPEN),
    }

    @property
    def is_open(self) -> bool:
        return self.status in (OPEN, None, "")

    @property
    def is_locked(self) -> bool:
        return self.status == LOCKED

    @property
    def is_closed(self) -> bool:
        return self.status == CLOSED

    def _transition(self, action: str) -> None:
        allowed_from, to_status = self.TRANSITIONS[action]
        current = self.status or OPEN
        if current not in allowed_from:
            raise InvalidStatusTransitionError(type(self).__name__, current, to_status)
        self.status = to_status
        logger.info(f"{type(self).__name__} {self.id} {current} -> {to_status}")

    def lock(self) -> None:
        self._transition("lock")

    def unlock(self) -> None:
        self._transition("unlock")

    def close(self) -> None:
        self._transition("close")

    def reopen(self) -> None:
        self._transition("reopen")


class AssignableMixin:
    """
    Bulk attribute assignment that skips protected attributes.

    Only mapped columns and settable properties (the money fields) can be
    assigned; relationships and anything else raise AttributeError.
    """

    PROTECTED_ATTRIBUTES: tuple = ()
    ALWAYS_PROTECTED = ("id", "status", "created_at", "updated_at")

    @classmethod
    def assignable_attributes(cls) -> set:
        names = {attr.key for attr in sa_inspect(cls).column_attrs}
        for klass in cls.__mro__:
            for name, value in vars(klass).items():
                if isinstance(value, property) and value.fset is not None:
                    names.add(name)
        return names

    def assign_attributes(self, attributes: Dict) -> None:
        assignable = self.assignable_attributes()
        for name, value in attributes.items():
            if name in self.PROTECTED_ATTRIBUTES or name in self.ALWAYS_PROTECTED:
                logger.warning(
                    f"Ignoring protected attribute '{name}' on {type(self).__name__}"
                )
                continue
            if name not in assignable:
                raise AttributeError(f"{type(self).__name__} has no attribute '{name}'")
            setattr(self, name, value)


# =============================================================================
# Host Application Data
# =============================================================================

class Project(Base):
    """Host project. Contracts, issues and issue categories belong to one."""
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    identifier = Column(String(100), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    contracts = relationship("Contract", back_populates="project", cascade="all, delete-orphan")
    issues = relationship("Issue", back_populates="project")
    issue_categories = relationship("IssueCategory", back_populates="project")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(100), unique=True, index=True, nullable=False)
    firstname = Column(String(100), default="")
    lastname = Column(String(100), default="")
    mail = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    rates = relationship("Rate", back_populates="user", cascade="all, delete-orphan")

    @property
    def name(self) -> str:
        return f"{self.firstname or ''} {self.lastname or ''}".strip() or self.login

    def rate_for(self, project_id: Optional[int] = None,
                 on_date: Optional[date] = None) -> Optional[Decimal]:
        """
        Hourly rate in effect for a project on a date.

        A project-specific rate wins over a default (project-less) rate;
        among candidates the latest date_in_effect on or before on_date is used.
        """
        on_date = on_date or date.today()
        in_effect = [
            r for r in self.rates
            if r.date_in_effect is None or r.date_in_effect <= on_date
        ]
        pool = [r for r in in_effect if project_id is not None and r.project_id == project_id]
        if not pool:
            pool = [r for r in in_effect if r.project_id is None]
        if not pool:
            return None
        return max(pool, key=lambda r: r.date_in_effect or date.min).amount


class Rate(Base):
    """Billing rate of a user, optionally specific to one project."""
    __tablename__ = "rates"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    amount_cents = Column(Integer, nullable=False, default=0)
    date_in_effect = Column(Date, nullable=True)

    user = relationship("User", back_populates="rates")

    amount = money_property("amount_cents", "Hourly rate")


class IssueCategory(Base):
    __tablename__ = "issue_categories"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    project = relationship("Project", back_populates="issue_categories")


class Issue(Base):
    __tablename__ = "issues"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("issue_categories.id"), nullable=True, index=True)
    deliverable_id = Column(Integer, ForeignKey("deliverables.id"), nullable=True, index=True)
    subject = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    project = relationship("Project", back_populates="issues")
    category = relationship("IssueCategory")
    deliverable = relationship("Deliverable", back_populates="issues")
    time_entries = relationship("TimeEntry", back_populates="issue")


class TimeEntryActivity(Base):
    """
    Activity a time entry is logged against (Design, Development, ...).
    Billable-ness comes from a custom field value, see ContractsConfig.
    """
    __tablename__ = "time_entry_activities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    active = Column(Boolean, default=True, index=True)
    position = Column(Integer, default=1)
    custom_values = Column(JSON, default=dict)

    @property
    def is_billable(self) -> bool:
        return get_config().is_billable(self.custom_values)


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    issue_id = Column(Integer, ForeignKey("issues.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("time_entry_activities.id"), nullable=False, index=True)
    hours = Column(Float, nullable=False, default=0.0)
    spent_on = Column(Date, nullable=False, default=date.today)
    comments = Column(String(255), nullable=True)

    project = relationship("Project")
    issue = relationship("Issue", back_populates="time_entries")
    user = relationship("User")
    activity = relationship("TimeEntryActivity")

    @property
    def cost(self) -> Decimal:
        """Hours times the user's rate on the day the time was spent."""
        if self.user is None or not self.hours:
            return ZERO
        project_id = self.project_id
        if project_id is None and self.issue is not None:
            project_id = self.issue.project_id
        rate = self.user.rate_for(project_id, self.spent_on)
        if rate is None:
            return ZERO
        return quantize_money(Decimal(str(self.hours)) * rate)


def _refers_to(foreign_key, related, target) -> bool:
    """True when a foreign key/relationship pair points at target, by id once persisted."""
    if foreign_key is None and related is not None:
        foreign_key = related.id
    if target.id is not None and foreign_key is not None:
        return foreign_key == target.id
    return related is target


# =============================================================================
# Contract (client agreement)
# =============================================================================

class Contract(StatusMixin, AssignableMixin, Base):
    """
    Agreement with a client for a project.
    Locked and closed contracts reject new deliverables and deliverable deletes.
    """
    __tablename__ = "contracts"

    PROTECTED_ATTRIBUTES = ("project_id", "project", "discount_type")

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    account_executive_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    executed = Column(Boolean, default=False)
    billable_rate_cents = Column(Integer, nullable=True)
    discount_cents = Column(Integer, nullable=True)  # Amount in cents, or percent * 100
    discount_type = Column(String(1), nullable=True)  # "$" or "%"
    discount_note = Column(Text, nullable=True)
    payment_terms = Column(String(100), nullable=True)
    client_ap_contact_information = Column(Text, nullable=True)
    po_number = Column(String(100), nullable=True)
    details = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=OPEN, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="contracts")
    account_executive = relationship("User", foreign_keys=[account_executive_id])
    deliverables = relationship(
        "Deliverable", back_populates="contract", order_by="Deliverable.id"
    )

    billable_rate = money_property("billable_rate_cents", "Hourly rate billed to the client")
    discount = money_property("discount_cents", "Flat amount for '$', percentage for '%'")

    def __init__(self, **kwargs):
        kwargs.setdefault("status", get_config().default_status)
        kwargs.setdefault("executed", False)
        super().__init__(**kwargs)

    def validate(self, session=None) -> Dict[str, List[str]]:
        return validation.validate_contract(self, session)

    def is_valid(self, session=None) -> bool:
        return not self.validate(session)

    def total_amount(self) -> Decimal:
        """Sum of the current totals of all deliverables."""
        return quantize_money(sum((d.current_total() for d in self.deliverables), ZERO))

    def discount_amount(self) -> Decimal:
        if not self.discount:
            return ZERO
        if self.discount_type == "$":
            return quantize_money(self.discount)
        if self.discount_type == "%":
            return quantize_money(self.total_amount() * self.discount / 100)
        return ZERO

    def total_after_discount(self) -> Decimal:
        return self.total_amount() - self.discount_amount()

    def total_spent(self) -> Decimal:
        return quantize_money(sum((d.total_spent() for d in self.deliverables), ZERO))

    def amount_remaining(self) -> Decimal:
        return self.total_after_discount() - self.total_spent()


# =============================================================================
# Deliverables (billable milestones)
# =============================================================================

class Deliverable(StatusMixin, AssignableMixin, Base):
    """
    Billable milestone of a contract.

    Subclassed by billing model: FixedDeliverable (fixed price),
    HourlyDeliverable (labor billed at the contract rate) and
    RetainerDeliverable (monthly fee, monthly budgets).
    """
    __tablename__ = "deliverables"

    PROTECTED_ATTRIBUTES = ("type",)

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True, index=True)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    type = Column(String(50), nullable=True, index=True)
    title = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    feature_sign_off = Column(Boolean, default=False)
    warranty_sign_off = Column(Boolean, default=False)
    total_cents = Column(Integer, nullable=True)
    status = Column(String(20), nullable=True, default=OPEN, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contract = relationship("Contract", back_populates="deliverables")
    manager = relationship("User", foreign_keys=[manager_id])
    budgets = relationship(
        "Budget", back_populates="deliverable", cascade="all, delete-orphan", order_by="Budget.id"
    )
    issues = relationship("Issue", back_populates="deliverable")

    __mapper_args__ = {"polymorphic_on": type}

    total = money_property("total_cents", "Contracted total; accepts '$20,100.00'")

    def __init__(self, **kwargs):
        kwargs.setdefault("status", get_config().default_status)
        super().__init__(**kwargs)

    def validate(self, session=None) -> Dict[str, List[str]]:
        return validation.validate_deliverable(self, is_new=self.id is None, session=session)

    def is_valid(self, session=None) -> bool:
        return not self.validate(session)

    @property
    def is_fixed(self) -> bool:
        return False

    @property
    def is_hourly(self) -> bool:
        return False

    @property
    def is_retainer(self) -> bool:
        return False

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    @property
    def labor_budgets(self) -> List["LaborBudget"]:
        return [b for b in self.budgets if isinstance(b, LaborBudget)]

    @property
    def overhead_budgets(self) -> List["OverheadBudget"]:
        return [b for b in self.budgets if isinstance(b, OverheadBudget)]

    @property
    def fixed_budgets(self) -> List["FixedBudget"]:
        return [b for b in self.budgets if isinstance(b, FixedBudget)]

    def budget_multiplier(self) -> int:
        """How many times each labor/overhead budget applies."""
        return 1

    def _activity_budgets(self, activity=None) -> List["Budget"]:
        budgets = self.labor_budgets + self.overhead_budgets
        if activity is None:
            return budgets
        return [
            b for b in budgets
            if _refers_to(b.time_entry_activity_id, b.time_entry_activity, activity)
        ]

    def budget_for_activity(self, activity) -> Decimal:
        """Planned cost for an activity across labor and overhead budgets."""
        planned = sum((b.budget or ZERO for b in self._activity_budgets(activity)), ZERO)
        return quantize_money(planned * self.budget_multiplier())

    def hours_budget_for_activity(self, activity) -> float:
        planned = sum(b.hours or 0.0 for b in self._activity_budgets(activity))
        return float(planned * self.budget_multiplier())

    def labor_budget_total(self) -> Decimal:
        planned = sum((b.budget or ZERO for b in self.labor_budgets), ZERO)
        return quantize_money(planned * self.budget_multiplier())

    def overhead_budget_total(self) -> Decimal:
        planned = sum((b.budget or ZERO for b in self.overhead_budgets), ZERO)
        return quantize_money(planned * self.budget_multiplier())

    def labor_hours_budget_total(self) -> float:
        return float(sum(b.hours or 0.0 for b in self.labor_budgets) * self.budget_multiplier())

    def overhead_hours_budget_total(self) -> float:
        return float(sum(b.hours or 0.0 for b in self.overhead_budgets) * self.budget_multiplier())

    def fixed_budget_total(self) -> Decimal:
        return quantize_money(sum((b.total() for b in self.fixed_budgets), ZERO))

    # -------------------------------------------------------------------------
    # Time entry aggregation
    # -------------------------------------------------------------------------

    def time_entries(self) -> Iterator[TimeEntry]:
        for issue in self.issues:
            yield from issue.time_entries

    def _entries(self, activity=None, user=None, category=None,
                 billable: Optional[bool] = None) -> List[TimeEntry]:
        entries = []
        for entry in self.time_entries():
            if activity is not None and not _refers_to(entry.activity_id, entry.activity, activity):
                continue
            if user is not None and not _refers_to(entry.user_id, entry.user, user):
                continue
            if category is not None and not _refers_to(
                    entry.issue.category_id, entry.issue.category, category):
                continue
            if billable is not None and entry.activity.is_billable != billable:
                continue
            entries.append(entry)
        return entries

    @staticmethod
    def _cost(entries: List[TimeEntry]) -> Decimal:
        return quantize_money(sum((e.cost for e in entries), ZERO))

    @staticmethod
    def _hours(entries: List[TimeEntry]) -> float:
        return float(sum(e.hours or 0.0 for e in entries))

    def _all_activities(self) -> List[TimeEntryActivity]:
        """
        Active activities in position order, followed by any inactive
        activity that still has time logged on this deliverable.
        """
        logged = {}
        for entry in self.time_entries():
            logged.setdefault(entry.activity.id or id(entry.activity), entry.activity)

        session = object_session(self)
        if session is None:
            return list(logged.values())

        activities = session.query(TimeEntryActivity).filter(
            TimeEntryActivity.active.is_(True)
        ).order_by(TimeEntryActivity.position, TimeEntryActivity.id).all()
        listed = {a.id for a in activities}
        activities.extend(
            a for key, a in logged.items() if key not in listed and not a.active
        )
        return activities

    def billable_time_entry_activities(self) -> List[TimeEntryActivity]:
        return [a for a in self._all_activities() if a.is_billable]

    def non_billable_time_entry_activities(self) -> List[TimeEntryActivity]:
        return [a for a in self._all_activities() if not a.is_billable]

    def spent_for_activity(self, activity) -> Decimal:
        return self._cost(self._entries(activity=activity))

    def hours_spent_for_activity(self, activity) -> float:
        return self._hours(self._entries(activity=activity))

    def _distinct(self, attribute: str, billable: bool) -> list:
        found = {}
        for entry in self._entries(billable=billable):
            value = entry.issue.category if attribute == "category" else getattr(entry, attribute)
            if value is not None:
                found.setdefault(value.id or id(value), value)
        return list(found.values())

    def users_with_billable_time(self) -> List[User]:
        return self._distinct("user", billable=True)

    def users_with_non_billable_time(self) -> List[User]:
        return self._distinct("user", billable=False)

    def hours_spent_for_user(self, user, billable: bool = True) -> float:
        """Hours the user logged on billable (or, with billable=False, non-billable) activities."""
        return self._hours(self._entries(user=user, billable=billable))

    def spent_for_user(self, user, billable: bool = True) -> Decimal:
        return self._cost(self._entries(user=user, billable=billable))

    def issue_categories_with_billable_time(self) -> List[IssueCategory]:
        return self._distinct("category", billable=True)

    def issue_categories_with_non_billable_time(self) -> List[IssueCategory]:
        return self._distinct("category", billable=False)

    def spent_for_issue_category(self, category, billable: bool = True) -> Decimal:
        return self._cost(self._entries(category=category, billable=billable))

    def hours_spent_for_issue_category(self, category, billable: bool = True) -> float:
        return self._hours(self._entries(category=category, billable=billable))

    # -------------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------------

    def labor_spent(self) -> Decimal:
        return self._cost(self._entries(billable=True))

    def overhead_spent(self) -> Decimal:
        return self._cost(self._entries(billable=False))

    def fixed_spent(self) -> Decimal:
        return quantize_money(sum((b.total() for b in self.fixed_budgets if b.paid), ZERO))

    def total_spent(self) -> Decimal:
        return self.labor_spent() + self.overhead_spent() + self.fixed_spent()

    def current_total(self) -> Decimal:
        return self.total if self.total is not None else ZERO

    def profit_left(self) -> Decimal:
        return self.current_total() - self.total_spent()

    def profit_budget(self) -> Decimal:
        planned = self.labor_budget_total() + self.overhead_budget_total() + self.fixed_budget_total()
        return self.current_total() - planned


class FixedDeliverable(Deliverable):
    """Fixed price deliverable."""
    __mapper_args__ = {"polymorphic_identity": "FixedDeliverable"}

    @property
    def is_fixed(self) -> bool:
        return True


class HourlyDeliverable(Deliverable):
    """Labor billed per billable hour at the contract's billable rate."""
    __mapper_args__ = {"polymorphic_identity": "HourlyDeliverable"}

    @property
    def is_hourly(self) -> bool:
        return True

    def current_total(self) -> Decimal:
        if self.contract is None or self.contract.billable_rate is None:
            return ZERO
        billable_hours = self._hours(self._entries(billable=True))
        return quantize_money(Decimal(str(billable_hours)) * self.contract.billable_rate)


class RetainerDeliverable(Deliverable):
    """Monthly retainer. Labor and overhead budgets are per month."""
    __mapper_args__ = {"polymorphic_identity": "RetainerDeliverable"}

    @property
    def is_retainer(self) -> bool:
        return True

    def months(self) -> List[date]:
        """First day of each calendar month covered by the retainer."""
        if not self.start_date or not self.end_date or self.end_date < self.start_date:
            return []

        months = []
        current = date(self.start_date.year, self.start_date.month, 1)
        while current <= self.end_date:
            months.append(current)
            if current.month == 12:
                current = date(current.year + 1, 1, 1)
            else:
                current = date(current.year, current.month + 1, 1)

        if not get_config().count_partial_months:
            last_day = calendar.monthrange(self.end_date.year, self.end_date.month)[1]
            if months and self.end_date.day != last_day:
                months.pop()
            if months and self.start_date.day != 1:
                months.pop(0)
        return months

    def budget_multiplier(self) -> int:
        return len(self.months())


# =============================================================================
# Budgets (planned cost / hours)
# =============================================================================

class Budget(AssignableMixin, Base):
    """
    Planned spend on a deliverable.
    LaborBudget and OverheadBudget plan hours and cost for an activity;
    FixedBudget is a one-off expense with an optional markup.
    """
    __tablename__ = "budgets"

    PROTECTED_ATTRIBUTES = ("type",)

    id = Column(Integer, primary_key=True, index=True)
    deliverable_id = Column(Integer, ForeignKey("deliverables.id"), nullable=True, index=True)
    time_entry_activity_id = Column(
        Integer, ForeignKey("time_entry_activities.id"), nullable=True, index=True
    )
    type = Column(String(50), nullable=True, index=True)
    title = Column(String(255), nullable=True)
    hours = Column(Float, nullable=True)
    budget_cents = Column(Integer, nullable=True)
    markup = Column(String(50), nullable=True)  # "10%" or "$50.00"
    paid = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    deliverable = relationship("Deliverable", back_populates="budgets")
    time_entry_activity = relationship("TimeEntryActivity")

    __mapper_args__ = {"polymorphic_on": type}

    budget = money_property("budget_cents", "Planned cost; accepts '$1,000.00'")

    tracks_activity = False

    def validate(self, session=None) -> Dict[str, List[str]]:
        return validation.validate_budget(self, session)

    def is_valid(self, session=None) -> bool:
        return not self.validate(session)

    def total(self) -> Decimal:
        return self.budget or ZERO


class LaborBudget(Budget):
    __mapper_args__ = {"polymorphic_identity": "LaborBudget"}

    tracks_activity = True


class OverheadBudget(Budget):
    __mapper_args__ = {"polymorphic_identity": "OverheadBudget"}

    tracks_activity = True


class FixedBudget(Budget):
    __mapper_args__ = {"polymorphic_identity": "FixedBudget"}

    def markup_value(self) -> Decimal:
        """Markup as money: a percentage of the budget or a flat amount."""
        if not self.markup or not self.markup.strip():
            return ZERO
        text = self.markup.strip()
        if text.endswith("%"):
            percent = unformat_currency(text[:-1]) or ZERO
            return quantize_money((self.budget or ZERO) * percent / 100)
        return quantize_money(unformat_currency(text) or ZERO)

    def total(self) -> Decimal:
        return (self.budget or ZERO) + self.markup_value()


def init_db():
    """Initialize the database and create all tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Database session dependency for FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Registers the validation and locking listeners on the models above
from billing_contracts.domain.events import handlers  # noqa: E402,F401
