"""Tests for the resource accessors.

Each test builds a real NexHealthClient on top of an httpx MockTransport so
the accessor's query parameters, version header and envelope handling are
all exercised. We verify typed results, empty results and that read
accessors degrade instead of raising.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

import httpx
import pytest

from nexhealth.config import NexHealthConfig
from nexhealth.models import Patient
from nexhealth.nexhealth_client import NexHealthAPIError, NexHealthClient
from nexhealth.resources.billing import (
    create_charge,
    create_payment,
    list_charges,
    list_payments,
    list_procedures,
)
from nexhealth.resources.locations import list_locations
from nexhealth.resources.patients import (
    build_test_patient,
    create_patient,
    fetch_balances,
    get_balance,
    get_patient,
    list_patients,
)
from nexhealth.resources.scheduling import (
    appointment_window,
    first_provider,
    list_appointments,
    list_providers,
    list_slots,
)

CONFIG = NexHealthConfig(
    api_key="test-key",
    subdomain="test-practice",
    location_id="42",
    base_url="https://api.test",
)


class Recorder:
    """Mock NexHealth: answers by path and records every request."""

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.routes.get(request.url.path, {"error": ["Not found"]})
        return httpx.Response(200, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _make_client(routes: dict[str, Any], billing: bool = False) -> tuple[NexHealthClient, Recorder]:
    recorder = Recorder(routes)
    factory = NexHealthClient.for_billing if billing else NexHealthClient.for_practice
    return factory(CONFIG, transport=httpx.MockTransport(recorder)), recorder


# --- patients ---


@pytest.mark.asyncio
async def test_list_patients() -> None:
    client, mock = _make_client(
        {
            "/patients": {
                "count": 1,
                "data": {
                    "patients": [
                        {
                            "id": 101,
                            "first_name": "Ana",
                            "last_name": "Lopez",
                            "email": "ana@example.com",
                            "bio": {"phone_number": "5551234567", "date_of_birth": "1990-01-15"},
                        }
                    ]
                },
            }
        }
    )

    patients = await list_patients(client, name="Ana")

    assert len(patients) == 1
    assert patients[0].full_name == "Ana Lopez"
    assert patients[0].phone_number == "5551234567"
    params = mock.last.url.params
    assert params["location_id"] == "42"
    assert params["name"] == "Ana"
    assert params["per_page"] == "10"
    assert mock.last.headers["accept"].endswith("version=2")


@pytest.mark.asyncio
async def test_list_patients_error_returns_empty() -> None:
    client, _ = _make_client({"/patients": {"error": ["Invalid API key"]}})

    patients = await list_patients(client)

    assert patients == []
    assert patients.total == 0


@pytest.mark.asyncio
async def test_list_patients_total_is_envelope_count() -> None:
    client, _ = _make_client(
        {"/patients": {"count": 42, "data": {"patients": [{"id": 1}, {"id": 2}]}}}
    )

    patients = await list_patients(client)

    assert len(patients) == 2
    assert patients.total == 42


@pytest.mark.asyncio
async def test_list_charges_total_falls_back_to_length() -> None:
    client, _ = _make_client({"/charges": {"data": [{"id": 1}, {"id": 2}]}}, billing=True)

    charges = await list_charges(client)

    assert charges.total == 2


@pytest.mark.asyncio
async def test_list_patients_without_bio() -> None:
    client, _ = _make_client(
        {"/patients": {"data": {"patients": [{"id": 1, "first_name": "Bo", "bio": None}]}}}
    )

    patients = await list_patients(client)

    assert patients[0].phone_number is None


@pytest.mark.asyncio
async def test_get_patient_nested_and_bare() -> None:
    client, _ = _make_client(
        {
            "/patients/1": {"data": {"patient": {"id": 1, "first_name": "Nested"}}},
            "/patients/2": {"data": {"id": 2, "first_name": "Bare"}},
        }
    )

    assert (await get_patient(client, 1)).first_name == "Nested"
    assert (await get_patient(client, 2)).first_name == "Bare"
    assert await get_patient(client, 3) is None


@pytest.mark.asyncio
async def test_create_patient_posts_nested_body() -> None:
    client, mock = _make_client(
        {"/patients": {"data": {"patient": {"id": 55, "first_name": "Test", "last_name": "Patient1"}}}}
    )

    patient = await create_patient(client, **build_test_patient(timestamp=1))

    assert patient.id == 55
    body = json.loads(mock.last.content)
    assert body == {
        "patient": {
            "first_name": "Test",
            "last_name": "Patient1",
            "email": "test1@example.com",
            "bio": {"phone_number": "5551234567", "date_of_birth": "1990-01-15"},
        }
    }
    assert mock.last.method == "POST"
    assert mock.last.url.params["location_id"] == "42"


@pytest.mark.asyncio
async def test_create_patient_propagates_error() -> None:
    client, _ = _make_client({"/patients": {"error": ["Email already taken"]}})

    with pytest.raises(NexHealthAPIError, match="Email already taken"):
        await create_patient(client, "Test", "Patient")


@pytest.mark.asyncio
async def test_get_balance_uses_billing_version() -> None:
    client, mock = _make_client({"/patients/7/balance": {"data": {"balance": 4250}}}, billing=True)

    assert await get_balance(client, 7) == 4250
    assert mock.last.headers["accept"].endswith("version=20240412")


@pytest.mark.asyncio
async def test_fetch_balances_records_failures_per_patient() -> None:
    client, mock = _make_client(
        {
            "/patients/1/balance": {"data": {"balance": 1000}},
            "/patients/2/balance": {"error": ["Requires Dentrix"]},
            "/patients/3/balance": {"data": {}},
        },
        billing=True,
    )
    patients = [Patient(id=1), Patient(id=2), Patient(id=3)]

    results = await fetch_balances(client, patients)

    assert [r.balance for r in results] == [1000, None, 0]
    assert results[1].error == "Requires Dentrix"
    assert [r.ok for r in results] == [True, False, True]
    # one request per patient, in order
    assert [r.url.path for r in mock.requests] == [
        "/patients/1/balance",
        "/patients/2/balance",
        "/patients/3/balance",
    ]


# --- scheduling ---


def test_appointment_window_spans_thirty_days() -> None:
    start, end = appointment_window(date(2024, 2, 15))
    assert start == date(2024, 2, 15)
    assert end == date(2024, 3, 16)


def test_appointment_window_defaults_to_today() -> None:
    start, end = appointment_window()
    assert start == date.today()
    assert (end - start).days == 30


@pytest.mark.asyncio
async def test_list_appointments_sends_window() -> None:
    client, mock = _make_client(
        {
            "/appointments": {
                "data": {
                    "appointments": [
                        {"id": 9, "patient_id": 1, "provider_id": 2, "confirmed": True}
                    ]
                }
            }
        }
    )

    appointments = await list_appointments(client, today=date(2024, 1, 1))

    assert appointments[0].confirmed is True
    params = mock.last.url.params
    assert params["start_date"] == "2024-01-01"
    assert params["end_date"] == "2024-01-31"


@pytest.mark.asyncio
async def test_providers_and_first_provider() -> None:
    client, mock = _make_client(
        {
            "/providers": {
                "data": {
                    "providers": [
                        {"id": 3, "first_name": "Sam", "last_name": "Ng", "inactive": True}
                    ]
                }
            }
        }
    )

    providers = await list_providers(client)
    assert providers[0].display_name == "Sam Ng"
    assert providers[0].active is False

    provider = await first_provider(client)
    assert provider is not None and provider.id == 3
    assert mock.last.url.params["per_page"] == "1"


@pytest.mark.asyncio
async def test_first_provider_none_when_empty() -> None:
    client, _ = _make_client({"/providers": {"data": {"providers": []}}})

    assert await first_provider(client) is None


@pytest.mark.asyncio
async def test_list_slots() -> None:
    client, mock = _make_client(
        {
            "/appointment_slots": {
                "data": [
                    {"lid": 42, "pid": 3, "slots": [{"time": "2024-01-02T09:00:00"}]}
                ]
            }
        }
    )

    groups = await list_slots(client, 42, 3, start_date=date(2024, 1, 2))

    assert groups[0].location_id == 42
    assert groups[0].provider_id == 3
    assert groups[0].slots[0].time == "2024-01-02T09:00:00"
    params = mock.last.url.params
    assert params["lids[]"] == "42"
    assert params["pids[]"] == "3"
    assert params["days"] == "7"
    assert params["start_date"] == "2024-01-02"


# --- locations ---


@pytest.mark.asyncio
async def test_list_locations_has_no_location_filter() -> None:
    client, mock = _make_client(
        {"/locations": {"data": {"locations": [{"id": 42, "name": "Main St", "zip_code": 12345}]}}}
    )

    locations = await list_locations(client)

    assert locations[0].name == "Main St"
    assert locations[0].zip_code == "12345"
    assert "location_id" not in mock.last.url.params


# --- billing ---


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"data": {"charges": [{"id": 1, "amount": 15000}]}},
        {"data": [{"id": 1, "amount": 15000}]},
    ],
)
async def test_list_charges_accepts_both_envelopes(payload: dict[str, Any]) -> None:
    client, mock = _make_client({"/charges": payload}, billing=True)

    charges = await list_charges(client, patient_id="77")

    assert [c.amount for c in charges] == [15000]
    assert mock.last.url.params["patient_id"] == "77"
    assert mock.last.headers["accept"].endswith("version=20240412")


@pytest.mark.asyncio
async def test_list_charges_n_marker_is_empty_not_error() -> None:
    client, _ = _make_client({"/charges": {"error": ["N"]}}, billing=True)

    assert await list_charges(client) == []


@pytest.mark.asyncio
async def test_list_payments_error_returns_empty() -> None:
    client, _ = _make_client({"/payments": {"error": ["Forbidden"]}}, billing=True)

    assert await list_payments(client) == []


@pytest.mark.asyncio
async def test_list_procedures_filters() -> None:
    client, mock = _make_client(
        {"/procedures": {"data": {"procedures": [{"id": 5, "code": "D1110", "fee": 9500}]}}}
    )

    procedures = await list_procedures(client, patient_id=1, updated_after=date(2020, 1, 1))

    assert procedures[0].code == "D1110"
    assert mock.last.url.params["updated_after"] == "2020-01-01"
    assert "page" not in mock.last.url.params


@pytest.mark.asyncio
async def test_create_charge_sends_cents() -> None:
    client, mock = _make_client({"/charges": {"data": {"charge": {"id": 1}}}}, billing=True)

    await create_charge(client, "449388061", "150.005", on=date(2024, 5, 1))

    assert json.loads(mock.last.content) == {
        "charge": {
            "patient_id": 449388061,
            "amount": 15001,
            "description": "Service charge",
            "date": "2024-05-01",
        }
    }


@pytest.mark.asyncio
async def test_create_payment_defaults_to_cash() -> None:
    client, mock = _make_client({"/payments": {"data": {"payment": {"id": 1}}}}, billing=True)

    await create_payment(client, 12, 19.99, on=date(2024, 5, 1))

    body = json.loads(mock.last.content)
    assert body["payment"]["amount"] == 1999
    assert body["payment"]["payment_method"] == "cash"
    assert body["payment"]["patient_id"] == 12


@pytest.mark.asyncio
async def test_create_payment_propagates_error() -> None:
    client, _ = _make_client({"/payments": {"error": ["Requires Dentrix"]}}, billing=True)

    with pytest.raises(NexHealthAPIError, match="Requires Dentrix"):
        await create_payment(client, 12, "10")
