"""Billing accessors: charges, payments, procedures.

Billing data only exists behind a production Dentrix connection; the sandbox
returns little or nothing. Reads therefore degrade to empty lists.

API endpoints used:
- GET  /charges     - Charges, optionally for one patient
- POST /charges     - Create a charge
- GET  /payments    - Payments, optionally for one patient
- POST /payments    - Record a payment
- GET  /procedures  - Procedures, optionally for one patient
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from nexhealth.envelope import Page, extract_list
from nexhealth.models import Charge, Payment, Procedure
from nexhealth.money import to_cents
from nexhealth.nexhealth_client import NexHealthClient, NexHealthError

logger = logging.getLogger(__name__)

DEFAULT_CHARGE_DESCRIPTION = "Service charge"
DEFAULT_PAYMENT_METHOD = "cash"


def _list_params(
    patient_id: int | str | None, page: int | None, per_page: int
) -> dict[str, Any]:
    return {"page": page, "per_page": per_page, "patient_id": patient_id or None}


async def list_charges(
    client: NexHealthClient,
    patient_id: int | str | None = None,
    page: int | None = 1,
    per_page: int = 20,
) -> Page:
    """List charges, optionally for a single patient.

    Returns:
        The charges, or an empty list if there are none or the call failed.
    """
    try:
        data = await client.get(
            "/charges",
            params=_list_params(patient_id, page, per_page),
            version=client.config.billing_api_version,
        )
    except NexHealthError as e:
        logger.warning("Could not fetch charges: %s", e)
        return Page()

    return Page.from_payload(
        data, (Charge.model_validate(c) for c in extract_list(data, "charges"))
    )


async def list_payments(
    client: NexHealthClient,
    patient_id: int | str | None = None,
    page: int | None = 1,
    per_page: int = 20,
) -> Page:
    """List payments, optionally for a single patient.

    Returns:
        The payments, or an empty list if there are none or the call failed.
    """
    try:
        data = await client.get(
            "/payments",
            params=_list_params(patient_id, page, per_page),
            version=client.config.billing_api_version,
        )
    except NexHealthError as e:
        logger.warning("Could not fetch payments: %s", e)
        return Page()

    return Page.from_payload(
        data, (Payment.model_validate(p) for p in extract_list(data, "payments"))
    )


async def list_procedures(
    client: NexHealthClient,
    patient_id: int | str | None = None,
    per_page: int = 50,
    updated_after: date | str | None = None,
) -> Page:
    """List procedures, optionally for one patient or changed since a date.

    For library callers. The dashboard proxies the raw ``/procedures``
    payload instead, since it forwards the envelope unchanged and must fail
    rather than degrade to an empty list.
    """
    if isinstance(updated_after, date):
        updated_after = updated_after.isoformat()
    params = {
        "patient_id": patient_id or None,
        "per_page": per_page,
        "updated_after": updated_after,
    }
    try:
        data = await client.get(
            "/procedures", params=params, version=client.config.api_version
        )
    except NexHealthError as e:
        logger.warning("Could not fetch procedures: %s", e)
        return Page()

    return Page.from_payload(
        data, (Procedure.model_validate(p) for p in extract_list(data, "procedures"))
    )


async def create_charge(
    client: NexHealthClient,
    patient_id: int | str,
    amount: str | float | Decimal,
    description: str | None = None,
    on: date | None = None,
) -> Any:
    """Create a charge against a patient.

    Args:
        client: The NexHealth client to call through.
        patient_id: Patient to charge.
        amount: Dollar amount; sent as integer cents.
        description: Charge description, "Service charge" if omitted.
        on: Charge date, today if omitted.

    Returns:
        The raw API response.

    Raises:
        NexHealthError: If the API rejects the charge or the call fails.
        ValueError: If ``patient_id`` or ``amount`` is not numeric.
    """
    body = {
        "charge": {
            "patient_id": int(patient_id),
            "amount": to_cents(amount),
            "description": description or DEFAULT_CHARGE_DESCRIPTION,
            "date": (on or date.today()).isoformat(),
        }
    }
    return await client.post(
        "/charges", body=body, version=client.config.billing_api_version
    )


async def create_payment(
    client: NexHealthClient,
    patient_id: int | str,
    amount: str | float | Decimal,
    method: str | None = None,
    on: date | None = None,
) -> Any:
    """Record a payment from a patient.

    Args:
        client: The NexHealth client to call through.
        patient_id: Paying patient.
        amount: Dollar amount; sent as integer cents.
        method: Payment method, "cash" if omitted.
        on: Payment date, today if omitted.

    Returns:
        The raw API response.

    Raises:
        NexHealthError: If the API rejects the payment or the call fails.
        ValueError: If ``patient_id`` or ``amount`` is not numeric.
    """
    body = {
        "payment": {
            "patient_id": int(patient_id),
            "amount": to_cents(amount),
            "payment_method": method or DEFAULT_PAYMENT_METHOD,
            "date": (on or date.today()).isoformat(),
        }
    }
    return await client.post(
        "/payments", body=body, version=client.config.billing_api_version
    )
