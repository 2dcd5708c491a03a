"""HTTP client for the NexHealth REST API.

This module provides the NexHealthClient class, which handles:
1. Building the request URL (base URL + endpoint + query parameters)
2. Injecting the practice subdomain (and, for billing, the location id)
3. Adding the raw API key and the versioned Accept header
4. Turning NexHealth's ``error`` array into exceptions

Concept: NexHealth error envelopes
    NexHealth answers most requests with HTTP 200 and reports failures inside
    the JSON body instead:

        {"code": false, "error": ["Invalid API key"], "data": null}

    So the status code is not enough. The client parses every body as JSON
    and raises NexHealthAPIError when ``error`` is non-empty, carrying the
    first message verbatim.

Usage:
    client = NexHealthClient.for_practice(NexHealthConfig())
    payload = await client.get("/patients", params={"location_id": "340668"})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from nexhealth.config import NexHealthConfig

logger = logging.getLogger(__name__)

ACCEPT_TEMPLATE = "application/vnd.Nexhealth+json;version={version}"

# The billing endpoints sometimes answer with an error array whose first
# entry is the bare string "N", or a blank entry such as null or "". The
# billing tools treat both as success; blank entries match as "".
BILLING_TOLERATED_ERRORS = frozenset({"N", ""})

UNSUPPORTED_VERSION_MARKER = "no longer supported"


class NexHealthError(Exception):
    """Base class for every failure raised by the NexHealth client."""


class NexHealthAPIError(NexHealthError):
    """Raised when the response body carries a non-empty ``error`` list.

    ``str(exc)`` is exactly the first vendor message, so callers can show it
    to the user unchanged.
    """

    def __init__(self, message: str, payload: Mapping[str, Any] | None = None) -> None:
        self.message = message
        self.payload = payload
        super().__init__(message)


class NexHealthTransportError(NexHealthError):
    """Raised when the HTTP exchange itself fails or the body is not JSON."""


def _stringify(value: Any) -> str:
    """Render a query parameter value the way the API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _error_messages(payload: Any) -> list[Any]:
    """Return the payload's error entries as a list (possibly empty)."""
    if not isinstance(payload, Mapping):
        return []
    errors = payload.get("error")
    if not errors:
        return []
    if isinstance(errors, str):
        return [errors]
    if isinstance(errors, list):
        return errors
    return [errors]


class NexHealthClient:
    """Async HTTP client for the NexHealth REST API.

    One instance corresponds to one "flavour" of call site. The CLIs and the
    dashboard each build the flavour they need through the ``for_*``
    factories rather than passing flags around.

    Attributes:
        config: The immutable connection settings.
        inject_location: Whether ``location_id`` goes on every request.
        default_version: Accept-header version used when a call gives none.
        tolerated_errors: First-error values that are returned, not raised.
    """

    def __init__(
        self,
        config: NexHealthConfig,
        inject_location: bool = False,
        default_version: str | None = None,
        tolerated_errors: Iterable[str] = (),
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.inject_location = inject_location
        self.default_version = default_version or config.api_version
        self.tolerated_errors = frozenset(tolerated_errors)

        # No timeout: a hung request blocks its caller, same as the
        # NexHealth dashboard this replaces.
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(None),
            transport=transport,
        )

    # --- Factories ---

    @classmethod
    def for_practice(cls, config: NexHealthConfig, **kwargs: Any) -> NexHealthClient:
        """Client for the demo tool: subdomain only, version 2."""
        return cls(config, inject_location=False, **kwargs)

    @classmethod
    def for_billing(cls, config: NexHealthConfig, **kwargs: Any) -> NexHealthClient:
        """Client for the billing tool.

        Adds ``location_id`` to every request, defaults to the billing API
        version and tolerates the ``"N"`` error marker and blank first errors.
        """
        return cls(
            config,
            inject_location=True,
            default_version=config.billing_api_version,
            tolerated_errors=BILLING_TOLERATED_ERRORS,
            **kwargs,
        )

    @classmethod
    def for_dashboard(cls, config: NexHealthConfig, **kwargs: Any) -> NexHealthClient:
        """Client for the dashboard server: location injected, version 2."""
        return cls(config, inject_location=True, **kwargs)

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> NexHealthClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- Request construction ---

    def build_params(self, params: Mapping[str, Any] | None = None) -> dict[str, str]:
        """Merge the fixed query parameters with the caller's.

        ``None`` values are dropped; everything else is stringified and
        overwrites an earlier key of the same name.
        """
        query: dict[str, str] = {"subdomain": self.config.subdomain}
        if self.inject_location:
            query["location_id"] = self.config.location_id
        for key, value in (params or {}).items():
            if value is None:
                continue
            query[key] = _stringify(value)
        return query

    def build_headers(
        self,
        version: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Authorization, versioned Accept and JSON content type headers."""
        merged = {
            "Authorization": self.config.api_key,
            "Accept": ACCEPT_TEMPLATE.format(version=version or self.default_version),
            "Content-Type": "application/json",
        }
        merged.update(headers or {})
        return merged

    # --- API Request Methods ---

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        version: str | None = None,
    ) -> Any:
        """Make a GET request to the NexHealth API.

        Args:
            endpoint: API path (e.g., "/patients" or "/patients/{id}").
            params: Optional query parameters.
            version: Accept-header version override for this call.

        Returns:
            The parsed JSON response body.

        Raises:
            NexHealthAPIError: If the body reports an error.
            NexHealthTransportError: If the request or JSON decoding fails.
        """
        return await self.request(endpoint, params=params, version=version)

    async def post(
        self,
        endpoint: str,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        version: str | None = None,
    ) -> Any:
        """Make a POST request with a JSON body. See ``get`` for errors."""
        return await self.request(
            endpoint, method="POST", params=params, body=body, version=version
        )

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        version: str | None = None,
    ) -> Any:
        """Send a request to the NexHealth API and interpret the envelope.

        Args:
            endpoint: API path relative to the base URL.
            method: HTTP method, GET by default.
            params: Query parameters, merged over subdomain/location.
            body: JSON body; omitted from the request when None.
            headers: Extra headers, applied over the defaults.
            version: Accept-header version, else the client default.

        Returns:
            The parsed JSON payload (usually a dict).

        Raises:
            NexHealthAPIError: If the payload's ``error`` list is non-empty
                and its first entry is not a tolerated marker.
            NexHealthTransportError: If the HTTP call fails or the body is
                not valid JSON.
        """
        url = f"{self.base_url}{endpoint}"
        query = self.build_params(params)
        logger.debug("%s %s params=%s", method, url, query)

        try:
            response = await self._http.request(
                method,
                url,
                params=query,
                headers=self.build_headers(version, headers),
                json=body,
            )
        except httpx.HTTPError as exc:
            raise NexHealthTransportError(f"Request to {url} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise NexHealthTransportError(
                f"Invalid JSON from {url} (HTTP {response.status_code})"
            ) from exc

        self._raise_for_error(payload)
        return payload

    def _raise_for_error(self, payload: Any) -> None:
        """Raise NexHealthAPIError if the payload reports a failure."""
        errors = _error_messages(payload)
        if not errors:
            return

        description = payload.get("description")
        if isinstance(description, list):
            description = " ".join(str(d) for d in description)
        if isinstance(description, str) and UNSUPPORTED_VERSION_MARKER in description:
            logger.warning("Note: %s", description)

        first = errors[0]
        marker = first or ""
        if isinstance(marker, str) and marker in self.tolerated_errors:
            logger.debug("Tolerating error marker %r", first)
            return

        logger.debug("API error: %s", errors)
        raise NexHealthAPIError(str(first), payload=payload)
