"""Request-scoped dependencies shared by the routers."""

from typing import Any, Dict

from fastapi import Depends, Request
from starlette.exceptions import HTTPException

from ..config import Settings, get_settings
from ..handlers.call_control import ProtocolRenderer
from ..handlers.orchestrator import CallOrchestrator


def get_orchestrator(request: Request) -> CallOrchestrator:
    return request.app.state.orchestrator


def get_renderer(request: Request) -> ProtocolRenderer:
    return request.app.state.renderer


def get_base_url(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Public origin for webhook URLs: SERVER_URL, else the request host."""
    if settings.server_url:
        return settings.server_url.rstrip("/")
    return f"https://{request.headers.get('host', request.url.netloc)}"


async def read_payload(request: Request) -> Dict[str, Any]:
    """Parse a webhook body as form data (Plivo's default) or JSON.

    Unparseable bodies yield an empty payload.
    """
    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type or "form-data" in content_type:
        try:
            form = await request.form()
        except HTTPException:
            # Starlette reports malformed multipart bodies as a 400
            return {}
        return dict(form)

    body = await request.body()
    if not body:
        return {}
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
