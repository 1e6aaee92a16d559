"""Call-control documents for the carrier's lifecycle webhooks.

Plivo asks for an XML document at each step of the call flow. The
renderer never raises on bad webhook input: it returns a `RenderResult`
carrying the error, and the caller switches to `render_fallback()`.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Protocol

from ..errors import ProtocolRenderError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

GREETING = "Connecting you now."
MISSING_SESSION_MESSAGE = "Error: No call identifier found."
DIAL_FAILED_MESSAGE = "The call could not be completed. Goodbye."
FALLBACK_MESSAGE = "An error occurred. Please try again later."

DEFAULT_SIP_DOMAIN = "sip.usw2.vocode.retellai.com"
DEFAULT_TIME_LIMIT = 3600

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True)
class RenderResult:
    xml: str = ""
    error: Optional[ProtocolRenderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProtocolRenderer(Protocol):
    def render_answer(
        self, session_id: Optional[str], caller_id: Optional[str], dial_action_url: str
    ) -> RenderResult:
        ...

    def render_dial_status(self, dial_status: Optional[str]) -> RenderResult:
        ...

    def render_fallback(self) -> str:
        ...


def sip_target(session_id: str, domain: str = DEFAULT_SIP_DOMAIN) -> str:
    return f"sip:{session_id}@{domain}"


class PlivoXMLRenderer:
    """Builds Plivo XML `<Response>` documents."""

    def __init__(self, sip_domain: str = DEFAULT_SIP_DOMAIN, time_limit: int = DEFAULT_TIME_LIMIT):
        self.sip_domain = sip_domain
        self.time_limit = time_limit

    def render_answer(
        self, session_id: Optional[str], caller_id: Optional[str], dial_action_url: str
    ) -> RenderResult:
        """Greet the callee and bridge the call to the agent's SIP endpoint.

        Without a session id there is nothing to dial, so the document
        speaks an error and hangs up instead.
        """
        session_id = (session_id or "").strip()
        if not session_id:
            return RenderResult(xml=self._speak_then_hangup(MISSING_SESSION_MESSAGE))

        if not _SESSION_ID_RE.match(session_id):
            return RenderResult(error=ProtocolRenderError(f"invalid call identifier {session_id!r}"))

        response = ET.Element("Response")
        ET.SubElement(response, "Speak").text = GREETING

        dial_attrs = {
            "timeLimit": str(self.time_limit),
            "action": dial_action_url,
            "method": "POST",
        }
        if caller_id:
            dial_attrs["callerId"] = caller_id
        dial = ET.SubElement(response, "Dial", dial_attrs)
        ET.SubElement(dial, "User").text = sip_target(session_id, self.sip_domain)

        return RenderResult(xml=_to_xml(response))

    def render_dial_status(self, dial_status: Optional[str]) -> RenderResult:
        if dial_status == "completed":
            response = ET.Element("Response")
            ET.SubElement(response, "Hangup")
            return RenderResult(xml=_to_xml(response))
        return RenderResult(xml=self._speak_then_hangup(DIAL_FAILED_MESSAGE))

    def render_fallback(self) -> str:
        return self._speak_then_hangup(FALLBACK_MESSAGE)

    def _speak_then_hangup(self, message: str) -> str:
        response = ET.Element("Response")
        ET.SubElement(response, "Speak").text = message
        ET.SubElement(response, "Hangup")
        return _to_xml(response)


def _to_xml(element: ET.Element) -> str:
    return XML_DECLARATION + ET.tostring(element, encoding="unicode")
