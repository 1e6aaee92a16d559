"""Plivo carrier client.

Places outbound calls through Plivo's REST API. Once Plivo accepts the
request the phone rings; there is nothing to undo from this side.
"""

from typing import Optional, Protocol

import httpx

from ..errors import UpstreamError
from ..logs import category_logger
from ..schemas import CallConfig
from .responses import json_or_empty

PROVIDER = "Plivo"

errors_log = category_logger("errors")


class TelephonyClient(Protocol):
    """Anything that can dial a number and attach call-control webhooks."""

    async def place_call(
        self, from_number: str, to_number: str, answer_url: str, config: CallConfig
    ) -> str:
        ...


class PlivoClient:
    def __init__(
        self,
        auth_id: Optional[str],
        auth_token: Optional[str],
        base_url: str = "https://api.plivo.com",
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.auth_id = auth_id
        self.auth_token = auth_token
        self.base_url = base_url.rstrip("/")
        self._http = http or httpx.AsyncClient()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def place_call(
        self, from_number: str, to_number: str, answer_url: str, config: CallConfig
    ) -> str:
        """Dial `to_number` and return Plivo's request UUID for the call."""
        payload = {
            "from": from_number,
            "to": to_number,
            "answer_url": answer_url,
            "answer_method": "POST",
            "hangup_url": config.hangup_url,
            "hangup_method": "POST",
            "ring_timeout": config.ring_timeout,
        }
        url = f"{self.base_url}/v1/Account/{self.auth_id}/Call/"
        auth = (self.auth_id or "", self.auth_token or "")

        try:
            resp = await self._http.post(url, json=payload, auth=auth)
        except httpx.HTTPError as exc:
            errors_log.error("Error creating Plivo call: %s", exc)
            raise UpstreamError(PROVIDER, str(exc) or exc.__class__.__name__) from exc

        data = json_or_empty(resp)
        if resp.status_code >= 400:
            # Plivo reports failures as {"api_id": ..., "error": ...}
            message = data.get("error") or resp.text or resp.reason_phrase
            if isinstance(message, dict):
                message = "; ".join(f"{k}: {v}" for k, v in message.items())
            errors_log.error("Error creating Plivo call: %s - %s", resp.status_code, message)
            raise UpstreamError(PROVIDER, str(message), status_code=resp.status_code)

        request_uuid = data.get("request_uuid")
        if isinstance(request_uuid, list):
            request_uuid = request_uuid[0] if request_uuid else None
        if not request_uuid:
            raise UpstreamError(PROVIDER, "response did not include a request_uuid", status_code=resp.status_code)

        return str(request_uuid)
