"""FastAPI server for the NexHealth billing dashboard.

Serves a single static page plus a small JSON API that proxies NexHealth:

- GET /api/patients        - One page of patients (``search`` filters by name)
- GET /api/patients/{id}   - Patient with procedures, charges and payments
- GET /api/procedures      - Recently updated procedures
- GET / and /index.html    - The dashboard page

Every response carries permissive CORS headers, OPTIONS always answers 200,
unknown routes answer 404 ``{"error": "Not found"}`` and handler failures
answer 500 ``{"error": <message>}``.

Run locally with:
    nexhealth-dashboard
or:
    uvicorn nexhealth.app:app --port 3456
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nexhealth.aggregation import get_patient_details
from nexhealth.config import DASHBOARD_HOST, DASHBOARD_PORT, NexHealthConfig
from nexhealth.nexhealth_client import NexHealthClient, NexHealthError

logger = logging.getLogger(__name__)

INDEX_HTML = Path(__file__).resolve().parent / "static" / "index.html"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

DEFAULT_PAGE = 1
DEFAULT_PATIENTS_PAGE_SIZE = 20
PROCEDURES_PAGE_SIZE = 100
PROCEDURES_UPDATED_AFTER = "2020-01-01"


def get_client(request: Request) -> NexHealthClient:
    """Dependency: the NexHealth client shared by every request."""
    return request.app.state.client


def create_app(
    config: NexHealthConfig | None = None,
    client: NexHealthClient | None = None,
) -> FastAPI:
    """Build the dashboard application.

    Args:
        config: Connection settings; read from the environment if omitted.
        client: A ready client (tests pass one with a mock transport);
            built with ``NexHealthClient.for_dashboard`` if omitted.
    """
    config = config or NexHealthConfig()
    client = client or NexHealthClient.for_dashboard(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.client.close()

    app = FastAPI(
        title="NexHealth Billing Dashboard",
        description="Patient, procedure and billing data from NexHealth",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.client = client

    @app.middleware("http")
    async def cors_and_errors(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            response: Response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unhandled error on %s", request.url.path)
                response = JSONResponse(status_code=500, content={"error": str(exc)})
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(NexHealthError)
    async def nexhealth_error_handler(request: Request, exc: NexHealthError) -> JSONResponse:
        logger.error("NexHealth call failed on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.get("/api/patients")
    async def patients(
        page: str | None = None,
        per_page: str | None = None,
        search: str = "",
        nexhealth: NexHealthClient = Depends(get_client),
    ) -> Any:
        """Proxy one page of the NexHealth patient list.

        Empty or missing paging values fall back to the defaults; anything
        else is passed through for NexHealth to interpret.
        """
        params = {
            "page": page or DEFAULT_PAGE,
            "per_page": per_page or DEFAULT_PATIENTS_PAGE_SIZE,
            "name": search or None,
        }
        return await nexhealth.get("/patients", params=params)

    @app.get("/api/patients/{patient_id}")
    async def patient_details(
        patient_id: str,
        nexhealth: NexHealthClient = Depends(get_client),
    ) -> dict[str, Any]:
        """Patient record plus procedures, charges and payments with counts."""
        details = await get_patient_details(nexhealth, patient_id)
        return details.model_dump(by_alias=True)

    @app.get("/api/procedures")
    async def procedures(nexhealth: NexHealthClient = Depends(get_client)) -> Any:
        """Proxy procedures updated since 2020."""
        params = {
            "per_page": PROCEDURES_PAGE_SIZE,
            "updated_after": PROCEDURES_UPDATED_AFTER,
        }
        return await nexhealth.get("/procedures", params=params)

    @app.get("/", response_class=HTMLResponse)
    @app.get("/index.html", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        return HTMLResponse(INDEX_HTML.read_text(encoding="utf-8"))

    return app


app = create_app()


def main() -> None:
    """Start the dashboard with uvicorn."""
    config = app.state.client.config
    print(
        "\n".join(
            [
                "╔══════════════════════════════════════════════════╗",
                "║       NexHealth Billing Dashboard                ║",
                "╠══════════════════════════════════════════════════╣",
                f"║  Server running at: {f'http://localhost:{DASHBOARD_PORT}':<29}║",
                f"║  Subdomain: {config.subdomain[:30]:<30}       ║",
                f"║  Location:  {config.location_id:<30}       ║",
                "╚══════════════════════════════════════════════════╝",
            ]
        )
    )
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(app, host=DASHBOARD_HOST, port=DASHBOARD_PORT)


if __name__ == "__main__":
    main()
