"""Patient detail aggregation for the dashboard.

The dashboard's patient view needs four independent lookups. They run
concurrently and are joined with ``asyncio.gather``; the first failure fails
the whole aggregation and no partial result is returned. (The billing CLI's
patient summary is the opposite: sequential and best-effort per section.)
"""

from __future__ import annotations

import asyncio
from typing import Any

from nexhealth.envelope import extract_count
from nexhealth.models import PatientDetails
from nexhealth.nexhealth_client import NexHealthClient

DETAIL_PAGE_SIZE = 50


def _data_or_empty(payload: Any) -> Any:
    data = payload.get("data") if isinstance(payload, dict) else None
    return data or []


async def get_patient_details(
    client: NexHealthClient, patient_id: int | str
) -> PatientDetails:
    """Fetch a patient with their procedures, charges and payments.

    Raises:
        NexHealthError: If any of the four lookups fails.
    """
    scoped = {"patient_id": patient_id, "per_page": DETAIL_PAGE_SIZE}
    patient, procedures, charges, payments = await asyncio.gather(
        client.get(f"/patients/{patient_id}"),
        client.get("/procedures", params=scoped),
        client.get("/charges", params=scoped),
        client.get("/payments", params=scoped),
    )

    return PatientDetails(
        patient=patient.get("data") if isinstance(patient, dict) else None,
        procedures=_data_or_empty(procedures),
        charges=_data_or_empty(charges),
        payments=_data_or_empty(payments),
        procedure_count=extract_count(procedures),
        charge_count=extract_count(charges),
        payment_count=extract_count(payments),
    )
