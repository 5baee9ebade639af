"""
Currency helpers.

Money is stored as integer cents to avoid float drift and exposed to
callers as Decimal. Form input such as "$20,100.00" is accepted wherever
a money value is assigned.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from billing_contracts.config import get_config

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyInput = Union[str, int, float, Decimal, None]


def unformat_currency(value: MoneyInput) -> Optional[Decimal]:
    """
    Parse a currency value typed by a user.

    Strips the currency symbol, thousands separators and whitespace.
    Blank input yields None.

    Raises:
        ValueError: If what remains is not a number
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))

    config = get_config()
    cleaned = str(value)
    for token in (config.currency_symbol, config.thousands_separator, "$", ","):
        if token:
            cleaned = cleaned.replace(token, "")
    cleaned = "".join(cleaned.split())
    if cleaned == "":
        return None

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a valid currency amount")


def to_cents(value: MoneyInput) -> Optional[int]:
    """Convert a money value to integer cents (None stays None)."""
    amount = unformat_currency(value)
    if amount is None:
        return None
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Optional[int]) -> Optional[Decimal]:
    """Convert integer cents to a two-place Decimal."""
    if cents is None:
        return None
    return (Decimal(cents) / 100).quantize(TWO_PLACES)


def quantize_money(amount) -> Decimal:
    return Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_currency(amount: Optional[Decimal]) -> str:
    """Format a money value for display, e.g. Decimal('-1200.5') -> '-$1,200.50'."""
    if amount is None:
        return ""
    config = get_config()
    places = config.decimal_places
    text = f"{abs(amount):,.{places}f}".replace(",", config.thousands_separator)
    sign = "-" if amount < 0 else ""
    return f"{sign}{config.currency_symbol}{text}"


def money_property(column_name: str, doc: Optional[str] = None) -> property:
    """
    Build a Decimal property backed by an integer cents column.

    The setter accepts formatted strings, so `deliverable.total = '$100.00'`
    stores 10000 in `total_cents`.
    """

    def getter(self) -> Optional[Decimal]:
        return from_cents(getattr(self, column_name))

    def setter(self, value: MoneyInput) -> None:
        setattr(self, column_name, to_cents(value))

    return property(getter, setter, doc=doc)
