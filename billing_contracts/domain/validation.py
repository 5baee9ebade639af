"""
Validation rules for contracts, deliverables and budgets.

Each validator returns a dict of field name -> list of messages; an empty
dict means the record is valid. Errors not tied to a single field are
reported under "base".
"""
from collections import defaultdict
from typing import Dict, List

from billing_contracts.config import get_config
from billing_contracts.domain.formatting import unformat_currency

BLANK = "can't be blank"
NOT_INCLUDED = "is not included in the list"
INVALID = "is invalid"

DISCOUNT_TYPES = ("$", "%")


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _require(errors, record, *attributes: str) -> None:
    for attribute in attributes:
        if is_blank(getattr(record, attribute, None)):
            errors[attribute].append(BLANK)


def _require_association(errors, record, name: str, session=None) -> None:
    """
    The associated record must be set. When the foreign key is set and
    a session is available, the key must resolve to an existing row.
    """
    related = getattr(record, name, None)
    key = getattr(record, f"{name}_id", None)
    if related is None and key is None:
        errors[name].append(BLANK)
        return
    if key is not None and session is not None and (related is None or related.id != key):
        related_class = getattr(type(record), name).property.mapper.class_
        if session.get(related_class, key) is None:
            errors[name].append(BLANK)


def _valid_markup(markup: str) -> bool:
    text = markup.strip()
    if text.endswith("%"):
        text = text[:-1]
    try:
        value = unformat_currency(text)
    except ValueError:
        return False
    return value is not None and value.is_finite()


def validate_contract(contract, session=None) -> Dict[str, List[str]]:
    """Validate a contract's required fields, dates, discount type and status."""
    errors = defaultdict(list)

    _require(errors, contract, "name", "start_date", "end_date")
    _require_association(errors, contract, "account_executive", session)
    _require_association(errors, contract, "project", session)
    if contract.executed is None:
        errors["executed"].append(BLANK)

    if contract.start_date and contract.end_date and contract.end_date <= contract.start_date:
        errors["end_date"].append("must be greater than start date")

    if not is_blank(contract.discount_type) and contract.discount_type not in DISCOUNT_TYPES:
        errors["discount_type"].append(NOT_INCLUDED)

    if contract.status not in get_config().statuses:
        errors["status"].append(NOT_INCLUDED)

    return dict(errors)


def validate_deliverable(deliverable, is_new: bool, session=None) -> Dict[str, List[str]]:
    """
    Validate a deliverable.

    A new deliverable cannot be added to a locked or closed contract.
    """
    errors = defaultdict(list)

    _require(errors, deliverable, "title", "type")
    _require_association(errors, deliverable, "manager", session)

    if not is_blank(deliverable.status) and deliverable.status not in get_config().statuses:
        errors["status"].append(NOT_INCLUDED)

    contract = deliverable.contract
    if is_new and contract is not None and (contract.is_locked or contract.is_closed):
        errors["base"].append(f"Can't create a deliverable on a {contract.status} contract")

    return dict(errors)


def validate_budget(budget, session=None) -> Dict[str, List[str]]:
    """Validate a labor, overhead or fixed budget."""
    errors = defaultdict(list)

    _require_association(errors, budget, "deliverable", session)
    _require(errors, budget, "type")

    if budget.tracks_activity:
        _require_association(errors, budget, "time_entry_activity", session)
        if budget.hours is not None and budget.hours < 0:
            errors["hours"].append("must be greater than or equal to 0")
    else:
        _require(errors, budget, "title")

    if not is_blank(budget.markup) and not _valid_markup(budget.markup):
        errors["markup"].append(INVALID)

    return dict(errors)
