"""NexHealth API demo tool.

Usage:
    nexhealth-demo patients          List patients
    nexhealth-demo patient <id>      Show one patient
    nexhealth-demo appointments      List appointments (next 30 days)
    nexhealth-demo providers         List providers
    nexhealth-demo locations         List locations
    nexhealth-demo slots             Get available appointment slots
    nexhealth-demo create-patient    Create a test patient
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from nexhealth.cli.common import configure_logging, print_banner, run_command
from nexhealth.config import NexHealthConfig
from nexhealth.formatting import (
    format_appointments,
    format_locations,
    format_patient,
    format_patients,
    format_providers,
    format_slot_groups,
)
from nexhealth.models import Appointment, Location, Patient, Provider, SlotGroup
from nexhealth.nexhealth_client import NexHealthClient
from nexhealth.resources.locations import list_locations
from nexhealth.resources.patients import (
    build_test_patient,
    create_patient,
    get_patient,
    list_patients,
)
from nexhealth.resources.scheduling import (
    DEFAULT_SLOT_DAYS,
    first_provider,
    list_appointments,
    list_providers,
    list_slots,
)

ENV_HELP = """\
Environment variables (optional):
  NEXHEALTH_API_KEY      - Override API key
  NEXHEALTH_SUBDOMAIN    - Override subdomain
  NEXHEALTH_LOCATION_ID  - Override location ID
"""


# --- Commands ---


async def show_patients(client: NexHealthClient) -> list[Patient]:
    print("\n📋 Fetching patients...\n")
    patients = await list_patients(client, page=1, per_page=10)
    print(format_patients(patients, total=patients.total))
    return patients


async def show_patient(client: NexHealthClient, patient_id: str) -> Patient | None:
    print(f"\n👤 Fetching patient {patient_id}...\n")
    patient = await get_patient(client, patient_id)
    if patient is None:
        print(f"Patient {patient_id} not found.")
        return None
    print(format_patient(patient))
    return patient


async def show_appointments(client: NexHealthClient) -> list[Appointment]:
    print("\n📅 Fetching appointments...\n")
    appointments = await list_appointments(client)
    print(format_appointments(appointments, total=appointments.total))
    return appointments


async def show_providers(client: NexHealthClient) -> list[Provider]:
    print("\n👨‍⚕️ Fetching providers...\n")
    providers = await list_providers(client)
    print(format_providers(providers, total=providers.total))
    return providers


async def show_locations(client: NexHealthClient) -> list[Location]:
    print("\n🏥 Fetching locations...\n")
    locations = await list_locations(client)
    print(format_locations(locations, total=locations.total))
    return locations


async def add_test_patient(client: NexHealthClient) -> Patient:
    print("\n➕ Creating test patient...\n")
    fields = build_test_patient()
    print(f"Creating patient: {fields['first_name']} {fields['last_name']}")

    patient = await create_patient(client, **fields)

    print("\n✓ Patient created successfully!")
    print(f"  ID: {patient.id}")
    print(f"  Name: {patient.full_name}")
    print(f"  Email: {patient.email}")
    return patient


async def show_slots(client: NexHealthClient) -> list[SlotGroup]:
    print("\n🕐 Fetching available appointment slots...\n")
    provider = await first_provider(client)
    if provider is None:
        print("No providers found - cannot fetch slots.")
        return []

    print(f"Using provider: {provider.display_name} (ID: {provider.id})")
    groups = await list_slots(
        client, client.config.location_id, provider.id, days=DEFAULT_SLOT_DAYS
    )
    print()
    if not any(g.slots for g in groups):
        print(f"No available slots found for the next {DEFAULT_SLOT_DAYS} days.")
    else:
        print(format_slot_groups(groups))
    return groups


# --- Main ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nexhealth-demo",
        description="NexHealth API Demo Tool",
        epilog=ENV_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.add_parser("patients", help="List patients")
    patient = sub.add_parser("patient", help="Show single patient")
    patient.add_argument("patient_id")
    sub.add_parser("appointments", help="List appointments (next 30 days)")
    sub.add_parser("providers", help="List providers")
    sub.add_parser("locations", help="List locations")
    sub.add_parser("slots", help="Get available appointment slots")
    sub.add_parser("create-patient", help="Create a test patient")
    sub.add_parser("help", help="Show this message")
    return parser


async def dispatch(args: argparse.Namespace, client: NexHealthClient) -> None:
    if args.command == "patients":
        await show_patients(client)
    elif args.command == "patient":
        await show_patient(client, args.patient_id)
    elif args.command == "appointments":
        await show_appointments(client)
    elif args.command == "providers":
        await show_providers(client)
    elif args.command == "locations":
        await show_locations(client)
    elif args.command == "slots":
        await show_slots(client)
    elif args.command == "create-patient":
        await add_test_patient(client)


async def _run(args: argparse.Namespace, config: NexHealthConfig) -> None:
    async with NexHealthClient.for_practice(config) as client:
        await dispatch(args, client)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    config = NexHealthConfig()
    print_banner("NexHealth API Demo Tool", config)

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    return run_command(_run(args, config))


if __name__ == "__main__":
    sys.exit(main())
