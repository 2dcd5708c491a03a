"""Scheduling accessors: appointments, providers, open slots.

API endpoints used:
- GET /appointments       - Appointments in a date window
- GET /providers          - Providers at the location
- GET /appointment_slots  - Open slots for location/provider pairs
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from nexhealth.envelope import Page, extract_list
from nexhealth.models import Appointment, Provider, SlotGroup
from nexhealth.nexhealth_client import NexHealthClient, NexHealthError

logger = logging.getLogger(__name__)

APPOINTMENT_WINDOW_DAYS = 30
DEFAULT_SLOT_DAYS = 7


def appointment_window(today: date | None = None) -> tuple[date, date]:
    """Return (today, today + 30 days), recomputed on every call."""
    start = today or date.today()
    return start, start + timedelta(days=APPOINTMENT_WINDOW_DAYS)


async def list_appointments(
    client: NexHealthClient,
    today: date | None = None,
    page: int = 1,
    per_page: int = 10,
) -> Page:
    """List appointments from today through the next 30 days.

    Args:
        client: The NexHealth client to call through.
        today: Start of the window; defaults to the current date.
        page: Page number.
        per_page: Page size.

    Returns:
        Appointments in the window, or an empty list if the call failed.
    """
    start, end = appointment_window(today)
    params = {
        "location_id": client.config.location_id,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "page": page,
        "per_page": per_page,
    }
    try:
        data = await client.get(
            "/appointments", params=params, version=client.config.api_version
        )
    except NexHealthError as e:
        logger.warning("Could not fetch appointments: %s", e)
        return Page()

    return Page.from_payload(
        data, (Appointment.model_validate(a) for a in extract_list(data, "appointments"))
    )


async def list_providers(
    client: NexHealthClient,
    page: int | None = 1,
    per_page: int = 20,
) -> Page:
    """List providers at the configured location."""
    params: dict[str, Any] = {
        "location_id": client.config.location_id,
        "page": page,
        "per_page": per_page,
    }
    try:
        data = await client.get(
            "/providers", params=params, version=client.config.api_version
        )
    except NexHealthError as e:
        logger.warning("Could not fetch providers: %s", e)
        return Page()

    return Page.from_payload(
        data, (Provider.model_validate(p) for p in extract_list(data, "providers"))
    )


async def first_provider(client: NexHealthClient) -> Provider | None:
    """Return any one provider, used to pick someone for slot lookups."""
    providers = await list_providers(client, page=None, per_page=1)
    return providers[0] if providers else None


async def list_slots(
    client: NexHealthClient,
    location_id: int | str,
    provider_id: int | str,
    start_date: date | None = None,
    days: int = DEFAULT_SLOT_DAYS,
) -> list[SlotGroup]:
    """List open appointment slots for one location/provider pair.

    Args:
        client: The NexHealth client to call through.
        location_id: Location to search.
        provider_id: Provider to search.
        start_date: First day of the search; defaults to today.
        days: Number of days to search.

    Returns:
        One SlotGroup per location/provider pair the API returned, or an
        empty list if the call failed.
    """
    params = {
        "start_date": (start_date or date.today()).isoformat(),
        "days": days,
        "lids[]": location_id,
        "pids[]": provider_id,
    }
    try:
        data = await client.get(
            "/appointment_slots", params=params, version=client.config.api_version
        )
    except NexHealthError as e:
        logger.warning("Could not fetch appointment slots: %s", e)
        return []

    return [SlotGroup.model_validate(g) for g in extract_list(data, "appointment_slots")]
