"""NexHealth billing tool.

Billing endpoints need a production connection to Dentrix; the sandbox has
little billing data, so most listings come back empty there.

Usage:
    nexhealth-billing balances                  List patient balances
    nexhealth-billing charges [patient_id]      List charges
    nexhealth-billing payments [patient_id]     List payments
    nexhealth-billing patient <patient_id>      Patient billing summary
    nexhealth-billing create-charge <patient_id> <amount> [description]
    nexhealth-billing create-payment <patient_id> <amount> [method]
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from nexhealth.cli.common import configure_logging, print_banner, run_command
from nexhealth.config import NexHealthConfig
from nexhealth.formatting import (
    format_balances,
    format_charge_lines,
    format_charges,
    format_payment_lines,
    format_payments,
    format_summary,
)
from nexhealth.models import BalanceResult, BillingSummary, Charge, Payment
from nexhealth.money import format_cents, summarize, to_cents
from nexhealth.nexhealth_client import NexHealthClient, NexHealthError
from nexhealth.resources.billing import (
    DEFAULT_CHARGE_DESCRIPTION,
    DEFAULT_PAYMENT_METHOD,
    create_charge,
    create_payment,
    list_charges,
    list_payments,
)
from nexhealth.resources.patients import fetch_balances, get_patient, list_patients

SUMMARY_PAGE_SIZE = 5

EXAMPLES = """\
Examples:
  nexhealth-billing balances
  nexhealth-billing patient 449388061
  nexhealth-billing create-charge 449388061 150.00 "Cleaning"
  nexhealth-billing create-payment 449388061 150.00 "credit_card"

Note: Billing functionality requires a production connection to Dentrix.
The sandbox environment has limited billing data.
"""


# --- Commands ---


async def show_charges(
    client: NexHealthClient, patient_id: str | None = None
) -> list[Charge]:
    print("\n💳 Fetching charges...\n")
    charges = await list_charges(client, patient_id=patient_id)
    print(format_charges(charges, total=charges.total))
    return charges


async def show_payments(
    client: NexHealthClient, patient_id: str | None = None
) -> list[Payment]:
    print("\n💰 Fetching payments...\n")
    payments = await list_payments(client, patient_id=patient_id)
    print(format_payments(payments, total=payments.total))
    return payments


async def show_balances(client: NexHealthClient) -> list[BalanceResult]:
    print("\n📊 Fetching patient balances...\n")
    patients = await list_patients(client, page=None, per_page=10)
    results = await fetch_balances(client, patients[:10])
    print(format_balances(results))
    print("\n(Note: Balance data requires production Dentrix connection)")
    return results


async def show_patient_billing(
    client: NexHealthClient, patient_id: str
) -> BillingSummary:
    """Print a patient's charges, payments and balance due.

    Each section is fetched in turn and degrades on its own: a missing
    patient record or a failed charge lookup still prints the rest.
    """
    rule = "═" * 50
    print(f"\n📋 Billing Summary for Patient {patient_id}\n")
    print(rule)

    patient = await get_patient(client, patient_id)
    if patient is not None:
        print(f"Patient: {patient.full_name}")
        print(f"Email: {patient.email or 'N/A'}")
        print(f"Phone: {patient.phone_number or 'N/A'}")
    else:
        print(f"Patient ID: {patient_id}")
    print(rule)

    print("\n--- Recent Charges ---")
    charges = await list_charges(
        client, patient_id=patient_id, page=None, per_page=SUMMARY_PAGE_SIZE
    )
    print(format_charge_lines(charges))

    print("\n--- Recent Payments ---")
    payments = await list_payments(
        client, patient_id=patient_id, page=None, per_page=SUMMARY_PAGE_SIZE
    )
    print(format_payment_lines(payments))

    summary = summarize(charges, payments)
    print("\n--- Summary ---")
    print(format_summary(summary))
    return summary


async def add_charge(
    client: NexHealthClient,
    patient_id: int,
    amount: str,
    description: str | None = None,
) -> object:
    print("\n➕ Creating charge...\n")
    print("Charge details:")
    print(f"  Patient: {patient_id}")
    print(f"  Amount: {format_cents(to_cents(amount))}")
    print(f"  Description: {description or DEFAULT_CHARGE_DESCRIPTION}")

    try:
        data = await create_charge(client, patient_id, amount, description)
    except NexHealthError:
        print("(Creating charges may require production Dentrix connection)", file=sys.stderr)
        raise

    print("\n✓ Charge created successfully!")
    print("Response:", json.dumps(data, indent=2))
    return data


async def add_payment(
    client: NexHealthClient,
    patient_id: int,
    amount: str,
    method: str | None = None,
) -> object:
    print("\n➕ Recording payment...\n")
    print("Payment details:")
    print(f"  Patient: {patient_id}")
    print(f"  Amount: {format_cents(to_cents(amount))}")
    print(f"  Method: {method or DEFAULT_PAYMENT_METHOD}")

    try:
        data = await create_payment(client, patient_id, amount, method)
    except NexHealthError:
        print("(Recording payments may require production Dentrix connection)", file=sys.stderr)
        raise

    print("\n✓ Payment recorded successfully!")
    print("Response:", json.dumps(data, indent=2))
    return data


# --- Main ---


def _amount(value: str) -> str:
    """argparse type: accept anything ``to_cents`` can convert."""
    try:
        to_cents(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nexhealth-billing",
        description="NexHealth Billing Module",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.add_parser("balances", help="List patient balances")

    charges = sub.add_parser("charges", help="List charges (optionally for a patient)")
    charges.add_argument("patient_id", nargs="?")
    payments = sub.add_parser("payments", help="List payments (optionally for a patient)")
    payments.add_argument("patient_id", nargs="?")

    patient = sub.add_parser("patient", help="Full billing summary for a patient")
    patient.add_argument("patient_id")

    charge = sub.add_parser("create-charge", help="Create a charge")
    charge.add_argument("patient_id", type=int)
    charge.add_argument("amount", type=_amount)
    charge.add_argument("description", nargs="?")

    payment = sub.add_parser("create-payment", help="Record a payment")
    payment.add_argument("patient_id", type=int)
    payment.add_argument("amount", type=_amount)
    payment.add_argument("method", nargs="?")

    sub.add_parser("help", help="Show this message")
    return parser


async def dispatch(args: argparse.Namespace, client: NexHealthClient) -> None:
    if args.command == "charges":
        await show_charges(client, args.patient_id)
    elif args.command == "payments":
        await show_payments(client, args.patient_id)
    elif args.command == "balances":
        await show_balances(client)
    elif args.command == "patient":
        await show_patient_billing(client, args.patient_id)
    elif args.command == "create-charge":
        await add_charge(client, args.patient_id, args.amount, args.description)
    elif args.command == "create-payment":
        await add_payment(client, args.patient_id, args.amount, args.method)


async def _run(args: argparse.Namespace, config: NexHealthConfig) -> None:
    async with NexHealthClient.for_billing(config) as client:
        await dispatch(args, client)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    config = NexHealthConfig()
    print_banner("NexHealth Billing Module", config)

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    return run_command(_run(args, config))


if __name__ == "__main__":
    sys.exit(main())
