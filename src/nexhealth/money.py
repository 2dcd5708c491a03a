"""Dollar/cent conversions.

NexHealth stores every amount as integer cents. Input is converted with
half-up rounding on a Decimal, so "1.005" becomes 101 cents rather than
whatever binary floating point makes of it.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from nexhealth.models import BillingSummary, Charge, Payment

_ONE = Decimal("1")


def to_cents(amount: str | int | float | Decimal) -> int:
    """Convert a dollar amount to integer cents.

    Raises:
        ValueError: If ``amount`` is not a finite number.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * 100).quantize(_ONE, rounding=ROUND_HALF_UP))


def format_cents(cents: int | None) -> str:
    """Render cents as dollars, e.g. 15000 -> "$150.00"."""
    return f"${(cents or 0) / 100:.2f}"


def summarize(charges: Iterable[Charge], payments: Iterable[Payment]) -> BillingSummary:
    """Total the charges and payments of one patient."""
    return BillingSummary(
        total_charges=sum(c.amount or 0 for c in charges),
        total_payments=sum(p.amount or 0 for p in payments),
    )
