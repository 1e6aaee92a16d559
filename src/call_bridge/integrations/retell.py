"""Retell voice agent client.

Registers an outbound phone call with Retell so the carrier leg can be
bridged to the agent over SIP. One request per call, no retries.
"""

from typing import Optional

import httpx

from ..errors import UpstreamError
from ..logs import category_logger
from ..schemas import VoiceAgentSession
from .responses import json_or_empty

PROVIDER = "Retell"
REGISTER_PATH = "/v1/call/register-phone-call"

errors_log = category_logger("errors")


class RetellClient:
    """Thin wrapper over Retell's call registration endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        agent_id: Optional[str],
        base_url: str = "https://api.retellai.com",
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.agent_id = agent_id
        self.base_url = base_url.rstrip("/")
        self._http = http or httpx.AsyncClient()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def register_session(self, from_number: str, to_number: str) -> VoiceAgentSession:
        """Register the call and return the session used as the SIP user."""
        payload = {
            "agent_id": self.agent_id,
            "from_number": from_number,
            "to_number": to_number,
            "direction": "outbound",
            "metadata": {"source": "plivo_integration"},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = await self._http.post(f"{self.base_url}{REGISTER_PATH}", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            errors_log.error("Error registering call with Retell: %s", exc)
            raise UpstreamError(PROVIDER, str(exc) or exc.__class__.__name__) from exc

        data = json_or_empty(resp)
        if resp.status_code >= 400:
            message = data.get("message") or data.get("error_message") or resp.text or resp.reason_phrase
            errors_log.error("Error registering call with Retell: %s - %s", resp.status_code, message)
            raise UpstreamError(PROVIDER, message, status_code=resp.status_code)

        call_id = data.get("call_id")
        if not call_id:
            raise UpstreamError(PROVIDER, "response did not include a call_id", status_code=resp.status_code)

        return VoiceAgentSession(session_id=str(call_id), raw=data)
