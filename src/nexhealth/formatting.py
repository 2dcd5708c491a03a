"""Console rendering of NexHealth records.

Every function returns a string (lines joined with newlines) and never
prints, so the CLIs decide where output goes and tests can assert on it.
List renderers take an optional ``total`` for the "Found N" header, the
envelope count when the API reports one.
"""

from __future__ import annotations

from collections.abc import Sequence

from nexhealth.models import (
    Appointment,
    BalanceResult,
    BillingSummary,
    Charge,
    Location,
    Patient,
    Payment,
    Provider,
    SlotGroup,
)
from nexhealth.money import format_cents

MAX_SLOTS_SHOWN = 5
RULE_WIDTH = 60

SANDBOX_NOTE = "(Note: Sandbox environment has limited billing data)"


def _or_na(value: object) -> str:
    return str(value) if value not in (None, "") else "N/A"


def format_patients(patients: Sequence[Patient], total: int | None = None) -> str:
    if not patients:
        return "No patients found."

    lines = [f"Found {total or len(patients)} patients:\n"]
    for i, p in enumerate(patients, 1):
        lines.append(f"{i}. {p.full_name}")
        lines.append(f"   ID: {p.id}")
        lines.append(f"   Email: {_or_na(p.email)}")
        lines.append(f"   Phone: {_or_na(p.phone_number)}")
        lines.append(f"   DOB: {_or_na(p.date_of_birth)}")
        lines.append("")
    return "\n".join(lines)


def format_patient(p: Patient) -> str:
    return "\n".join(
        [
            f"Name: {p.full_name}",
            f"ID: {p.id}",
            f"Email: {_or_na(p.email)}",
            f"Phone: {_or_na(p.phone_number)}",
            f"DOB: {_or_na(p.date_of_birth)}",
            f"Created: {_or_na(p.created_at)}",
        ]
    )


def format_appointments(
    appointments: Sequence[Appointment], total: int | None = None
) -> str:
    if not appointments:
        return "No appointments found in the next 30 days."

    lines = [f"Found {total or len(appointments)} appointments:\n"]
    for i, a in enumerate(appointments, 1):
        lines.append(f"{i}. Appointment #{a.id}")
        lines.append(f"   Patient ID: {a.patient_id}")
        lines.append(f"   Provider ID: {a.provider_id}")
        lines.append(f"   Start: {a.start_time}")
        lines.append(f"   End: {a.end_time}")
        lines.append(f"   Confirmed: {'Yes' if a.confirmed else 'No'}")
        lines.append("")
    return "\n".join(lines)


def format_providers(providers: Sequence[Provider], total: int | None = None) -> str:
    if not providers:
        return "No providers found."

    lines = [f"Found {total or len(providers)} providers:\n"]
    for i, p in enumerate(providers, 1):
        lines.append(f"{i}. {p.display_name}")
        lines.append(f"   ID: {p.id}")
        lines.append(f"   Type: {_or_na(p.provider_type)}")
        lines.append(f"   Active: {'Yes' if p.active else 'No'}")
        lines.append("")
    return "\n".join(lines)


def format_locations(locations: Sequence[Location], total: int | None = None) -> str:
    if not locations:
        return "No locations found."

    lines = [f"Found {total or len(locations)} locations:\n"]
    for i, loc in enumerate(locations, 1):
        city_line = " ".join(x for x in [loc.city, loc.state, loc.zip_code] if x)
        lines.append(f"{i}. {loc.name}")
        lines.append(f"   ID: {loc.id}")
        lines.append(f"   Address: {_or_na(loc.address_line_1)}, {city_line}".rstrip())
        lines.append(f"   Phone: {_or_na(loc.phone_number)}")
        lines.append("")
    return "\n".join(lines)


def format_slot_groups(groups: Sequence[SlotGroup], limit: int = MAX_SLOTS_SHOWN) -> str:
    """Render open slots, at most ``limit`` per group plus a "more" line."""
    groups = [g for g in groups if g.slots]
    if not groups:
        return "No available slots found."

    lines = ["Available slots:"]
    for group in groups:
        lines.append(f"\nLocation {group.location_id}, Provider {group.provider_id}:")
        for slot in group.slots[:limit]:
            lines.append(f"  - {slot.time}")
        hidden = len(group.slots) - limit
        if hidden > 0:
            lines.append(f"  ... and {hidden} more")
    return "\n".join(lines)


def format_charges(charges: Sequence[Charge], total: int | None = None) -> str:
    if not charges:
        return f"No charges found.\n\n{SANDBOX_NOTE}"

    lines = [f"Found {total or len(charges)} charges:\n"]
    for i, c in enumerate(charges, 1):
        lines.append(f"{i}. Charge #{c.id}")
        lines.append(f"   Patient ID: {c.patient_id}")
        lines.append(f"   Amount: {format_cents(c.amount)}")
        lines.append(f"   Description: {_or_na(c.description)}")
        lines.append(f"   Date: {_or_na(c.date or c.created_at)}")
        lines.append(f"   Status: {_or_na(c.status)}")
        lines.append("")
    return "\n".join(lines)


def format_payments(payments: Sequence[Payment], total: int | None = None) -> str:
    if not payments:
        return f"No payments found.\n\n{SANDBOX_NOTE}"

    lines = [f"Found {total or len(payments)} payments:\n"]
    for i, p in enumerate(payments, 1):
        lines.append(f"{i}. Payment #{p.id}")
        lines.append(f"   Patient ID: {p.patient_id}")
        lines.append(f"   Amount: {format_cents(p.amount)}")
        lines.append(f"   Method: {_or_na(p.payment_method)}")
        lines.append(f"   Date: {_or_na(p.date or p.created_at)}")
        lines.append("")
    return "\n".join(lines)


def format_balances(results: Sequence[BalanceResult]) -> str:
    """Render the balance table; failed lookups show "(N/A)"."""
    rule = "─" * RULE_WIDTH
    lines = [
        "Patient Balances:\n",
        rule,
        "ID".ljust(12) + "Name".ljust(25) + "Balance",
        rule,
    ]
    for r in results:
        name = r.patient.full_name[:23]
        amount = format_cents(r.balance) if r.ok else "(N/A)"
        lines.append(str(r.patient.id).ljust(12) + name.ljust(25) + amount)
    lines.append(rule)
    return "\n".join(lines)


def format_charge_lines(charges: Sequence[Charge]) -> str:
    """Compact one-line-per-charge listing used in the patient summary."""
    if not charges:
        return "No charges found."
    return "\n".join(
        f"  {c.date or 'N/A'} - {format_cents(c.amount)} - {c.description or 'Charge'}"
        for c in charges
    )


def format_payment_lines(payments: Sequence[Payment]) -> str:
    """Compact one-line-per-payment listing used in the patient summary."""
    if not payments:
        return "No payments found."
    return "\n".join(
        f"  {p.date or 'N/A'} - {format_cents(p.amount)} - {p.payment_method or 'Payment'}"
        for p in payments
    )


def format_summary(summary: BillingSummary) -> str:
    return "\n".join(
        [
            f"Total Charges:  {format_cents(summary.total_charges)}",
            f"Total Payments: {format_cents(summary.total_payments)}",
            f"Balance Due:    {format_cents(summary.balance_due)}",
        ]
    )
