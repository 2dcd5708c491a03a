"""Patient accessors.

API endpoints used:
- GET  /patients               - Paginated patient list, optional name filter
- GET  /patients/{id}          - One patient
- POST /patients               - Create a patient
- GET  /patients/{id}/balance  - Outstanding balance (billing API version)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from nexhealth.envelope import Page, extract_list, extract_record
from nexhealth.models import BalanceResult, Patient
from nexhealth.nexhealth_client import NexHealthClient, NexHealthError

logger = logging.getLogger(__name__)


async def list_patients(
    client: NexHealthClient,
    page: int | None = 1,
    per_page: int = 10,
    name: str | None = None,
) -> Page:
    """List one page of patients at the configured location.

    Args:
        client: The NexHealth client to call through.
        page: Page number, or None to let the API pick the first page.
        per_page: Page size.
        name: Optional name filter.

    Returns:
        The patients on the page as a Page whose ``total`` is the
        envelope count, or an empty Page if the call failed.
    """
    params: dict[str, Any] = {
        "location_id": client.config.location_id,
        "page": page,
        "per_page": per_page,
        "name": name or None,
    }
    try:
        data = await client.get(
            "/patients", params=params, version=client.config.api_version
        )
    except NexHealthError as e:
        logger.warning("Could not fetch patients: %s", e)
        return Page()

    return Page.from_payload(
        data, (Patient.model_validate(p) for p in extract_list(data, "patients"))
    )


async def get_patient(client: NexHealthClient, patient_id: int | str) -> Patient | None:
    """Fetch one patient by ID, or None if it could not be fetched."""
    try:
        data = await client.get(
            f"/patients/{patient_id}",
            params={"location_id": client.config.location_id},
            version=client.config.api_version,
        )
    except NexHealthError as e:
        logger.warning("Could not fetch patient %s: %s", patient_id, e)
        return None

    record = extract_record(data, "patient")
    if record is None:
        return None
    return Patient.model_validate(record)


def build_test_patient(timestamp: int | None = None) -> dict[str, Any]:
    """Build the ``create-patient`` demo payload with a unique name/email."""
    stamp = timestamp if timestamp is not None else int(time.time() * 1000)
    return {
        "first_name": "Test",
        "last_name": f"Patient{stamp}",
        "email": f"test{stamp}@example.com",
        "phone_number": "5551234567",
        "date_of_birth": "1990-01-15",
    }


async def create_patient(
    client: NexHealthClient,
    first_name: str,
    last_name: str,
    email: str | None = None,
    phone_number: str | None = None,
    date_of_birth: str | None = None,
) -> Patient:
    """Create a patient at the configured location.

    Returns:
        The created patient as echoed back by the API.

    Raises:
        NexHealthError: If the API rejects the patient or the call fails.
    """
    body = {
        "patient": {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "bio": {
                "phone_number": phone_number,
                "date_of_birth": date_of_birth,
            },
        }
    }
    data = await client.post(
        "/patients",
        body=body,
        params={"location_id": client.config.location_id},
        version=client.config.api_version,
    )
    return Patient.model_validate(extract_record(data, "patient") or {})


async def get_balance(client: NexHealthClient, patient_id: int | str) -> int:
    """Return a patient's balance in cents.

    This endpoint only has data behind a production Dentrix connection, so
    it fails often. The failure is raised rather than swallowed so that
    ``fetch_balances`` can record it against the patient.

    Raises:
        NexHealthError: If the balance could not be fetched.
    """
    data = await client.get(
        f"/patients/{patient_id}/balance",
        version=client.config.billing_api_version,
    )
    record = extract_record(data, "balance") or {}
    balance = record.get("balance")
    return balance if isinstance(balance, int) and not isinstance(balance, bool) else 0


async def fetch_balances(
    client: NexHealthClient, patients: Iterable[Patient]
) -> list[BalanceResult]:
    """Fetch each patient's balance one at a time.

    Returns:
        One BalanceResult per patient, in order. A failed lookup is recorded
        in ``error`` and does not stop the batch.
    """
    results: list[BalanceResult] = []
    for patient in patients:
        try:
            balance = await get_balance(client, patient.id)
        except NexHealthError as e:
            logger.info("No balance for patient %s: %s", patient.id, e)
            results.append(BalanceResult(patient=patient, error=str(e)))
        else:
            results.append(BalanceResult(patient=patient, balance=balance))
    return results
