"""Configuration for the NexHealth practice tools.

Loads settings from environment variables (via a .env file or the system
environment). Every value has a default pointing at the NexHealth sandbox
demo practice, so the package imports cleanly without any env vars set.

The module-level constants are read once at import. Code that talks to the
API never reads them directly: it receives a ``NexHealthConfig`` instance,
which defaults to these constants but can be built by hand (tests do this).
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load .env file if it exists (it won't exist in CI)
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)

# --- NexHealth connection ---
# The API key goes straight into the Authorization header, no "Bearer".
NEXHEALTH_API_KEY: str = os.getenv("NEXHEALTH_API_KEY", "")

# The practice's subdomain and the location the billing tools work against.
NEXHEALTH_SUBDOMAIN: str = os.getenv(
    "NEXHEALTH_SUBDOMAIN", "gentle-family-dentistry-demo-practice"
)
NEXHEALTH_LOCATION_ID: str = os.getenv("NEXHEALTH_LOCATION_ID", "340668")
NEXHEALTH_BASE_URL: str = os.getenv("NEXHEALTH_BASE_URL", "https://nexhealth.info")

# --- API versions ---
# Patients, appointments, providers and locations speak version 2.
# Charges, payments and balances need the newer date-stamped version.
NEXHEALTH_API_VERSION: str = os.getenv("NEXHEALTH_API_VERSION", "2")
NEXHEALTH_BILLING_API_VERSION: str = os.getenv(
    "NEXHEALTH_BILLING_API_VERSION", "20240412"
)

# --- Logging ---
NEXHEALTH_LOG_LEVEL: str = os.getenv("NEXHEALTH_LOG_LEVEL", "WARNING")

# --- Dashboard server ---
DASHBOARD_HOST: str = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT: int = int(os.getenv("PORT", "3456"))


class NexHealthConfig(BaseModel):
    """Immutable connection settings handed to ``NexHealthClient``.

    Attributes:
        api_key: Raw API key sent in the Authorization header.
        subdomain: Practice subdomain, sent on every request.
        location_id: Location injected by the billing and dashboard clients.
        base_url: Root URL of the NexHealth API.
        api_version: Accept-header version for practice endpoints.
        billing_api_version: Accept-header version for billing endpoints.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = NEXHEALTH_API_KEY
    subdomain: str = NEXHEALTH_SUBDOMAIN
    location_id: str = NEXHEALTH_LOCATION_ID
    base_url: str = NEXHEALTH_BASE_URL
    api_version: str = NEXHEALTH_API_VERSION
    billing_api_version: str = NEXHEALTH_BILLING_API_VERSION
