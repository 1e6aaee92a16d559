"""ASGI app entrypoint for the call bridge.

This module exposes the FastAPI `app` object, wires the Retell and Plivo
clients into it and maps bridge errors onto JSON responses.
"""

import platform
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import calls as calls_router
from .api import webhooks as webhooks_router
from .config import Settings, get_settings
from .errors import UpstreamError, ValidationError
from .handlers.call_control import PlivoXMLRenderer, ProtocolRenderer
from .handlers.orchestrator import CallOrchestrator
from .integrations.plivo import PlivoClient
from .integrations.retell import RetellClient
from .logs import category_logger, configure_logging
from .schemas import ErrorResponse, HealthResponse

errors_log = category_logger("errors")
server_log = category_logger("server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open one shared HTTP client for both vendors unless one was injected."""
    settings: Settings = app.state.settings
    http: Optional[httpx.AsyncClient] = None

    if getattr(app.state, "orchestrator", None) is None:
        http = httpx.AsyncClient()
        retell = RetellClient(
            settings.retell_api_key,
            settings.retell_agent_id,
            base_url=settings.retell_api_base,
            http=http,
        )
        plivo = PlivoClient(
            settings.plivo_auth_id,
            settings.plivo_auth_token,
            base_url=settings.plivo_api_base,
            http=http,
        )
        app.state.orchestrator = CallOrchestrator(retell, plivo, ring_timeout=settings.ring_timeout)

    server_log.info("Server running on port %s", settings.port)
    server_log.info("Health check: http://localhost:%s/health", settings.port)
    server_log.info("Web interface: http://localhost:%s/", settings.port)
    yield

    if http is not None:
        await http.aclose()
        app.state.orchestrator = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[CallOrchestrator] = None,
    renderer: Optional[ProtocolRenderer] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Call Bridge", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.state.renderer = renderer or PlivoXMLRenderer(
        sip_domain=settings.retell_sip_domain,
        time_limit=settings.dial_time_limit,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    app.include_router(calls_router.router, tags=["calls"])
    app.include_router(webhooks_router.router, tags=["webhooks"])

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        errors_log.info("Rejected %s: %s", request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(UpstreamError)
    async def upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
        errors_log.error("Error initiating call: %s", exc, exc_info=exc)
        return _error(500, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        errors_log.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return _error(500, str(exc) or exc.__class__.__name__)

    # Minimal health endpoint used for readiness/liveness checks
    @app.get("/health", response_model=HealthResponse, status_code=200)
    async def health(request: Request) -> HealthResponse:
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            environment={
                "python": platform.python_version(),
                "host": request.headers.get("host"),
            },
        )

    return app


app = create_app()
