"""Location accessor.

API endpoints used:
- GET /locations  - Every location of the practice (no location filter)
"""

from __future__ import annotations

import logging

from nexhealth.envelope import Page, extract_list
from nexhealth.models import Location
from nexhealth.nexhealth_client import NexHealthClient, NexHealthError

logger = logging.getLogger(__name__)


async def list_locations(client: NexHealthClient) -> Page:
    """List the practice's locations, or an empty list if the call failed."""
    try:
        data = await client.get("/locations", version=client.config.api_version)
    except NexHealthError as e:
        logger.warning("Could not fetch locations: %s", e)
        return Page()

    return Page.from_payload(
        data, (Location.model_validate(loc) for loc in extract_list(data, "locations"))
    )
