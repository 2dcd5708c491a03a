"""Tests for the patient detail aggregation used by the dashboard."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from nexhealth.aggregation import get_patient_details
from nexhealth.config import NexHealthConfig
from nexhealth.nexhealth_client import NexHealthAPIError, NexHealthClient

CONFIG = NexHealthConfig(api_key="k", subdomain="s", location_id="42", base_url="https://api.test")

UPSTREAM = {
    "/patients/123": {"data": {"id": 123, "first_name": "Ana"}},
    "/procedures": {"count": 2, "data": [{"id": 1}, {"id": 2}]},
    "/charges": {"count": 1, "data": [{"id": 10, "amount": 15000}]},
    "/payments": {"data": []},
}


def _make_client(routes: dict[str, object], seen: list[httpx.Request] | None = None) -> NexHealthClient:
    async def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(200, json=routes[request.url.path])

    return NexHealthClient.for_dashboard(CONFIG, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_composes_all_four_lookups() -> None:
    seen: list[httpx.Request] = []
    client = _make_client(UPSTREAM, seen)

    details = await get_patient_details(client, "123")

    assert details.model_dump(by_alias=True) == {
        "patient": {"id": 123, "first_name": "Ana"},
        "procedures": [{"id": 1}, {"id": 2}],
        "charges": [{"id": 10, "amount": 15000}],
        "payments": [],
        "procedureCount": 2,
        "chargeCount": 1,
        "paymentCount": 0,
    }
    scoped = [r for r in seen if r.url.path != "/patients/123"]
    assert len(scoped) == 3
    for request in scoped:
        assert request.url.params["patient_id"] == "123"
        assert request.url.params["per_page"] == "50"

    await client.close()


@pytest.mark.asyncio
async def test_any_failure_fails_the_whole_aggregation() -> None:
    routes = dict(UPSTREAM)
    routes["/charges"] = {"error": ["Charges unavailable"]}
    client = _make_client(routes)

    with pytest.raises(NexHealthAPIError, match="Charges unavailable"):
        await get_patient_details(client, "123")

    await client.close()


@pytest.mark.asyncio
async def test_lookups_run_concurrently() -> None:
    """All four requests are in flight before any of them completes."""
    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200, json=UPSTREAM[request.url.path])

    client = NexHealthClient.for_dashboard(CONFIG, transport=httpx.MockTransport(handler))

    await get_patient_details(client, "123")

    assert peak == 4

    await client.close()
