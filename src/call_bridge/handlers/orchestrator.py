"""Outbound call setup.

Registers the session with the voice agent first, because the answer
webhook handed to the carrier embeds the session id in the SIP target,
then asks the carrier to dial.
"""

import logging
import re
from typing import Optional
from urllib.parse import quote

from ..errors import UpstreamError, ValidationError
from ..integrations.plivo import TelephonyClient
from ..integrations.retell import RetellClient
from ..logs import category_logger
from ..schemas import CallConfig, CallInitiationRequest, CallInitiationResult, CallRecord

logger = logging.getLogger(__name__)
calls_log = category_logger("calls")

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_number(number: Optional[str]) -> str:
    return _WHITESPACE_RE.sub("", number or "")


class CallOrchestrator:
    def __init__(self, voice_agent: RetellClient, telephony: TelephonyClient, ring_timeout: int = 30):
        self.voice_agent = voice_agent
        self.telephony = telephony
        self.ring_timeout = ring_timeout

    async def initiate_call(self, request: CallInitiationRequest, base_url: str) -> CallInitiationResult:
        """Register the agent session, then dial.

        Raises ValidationError before any upstream call when a number is
        missing, and UpstreamError from whichever vendor rejected the call.
        """
        to_number = normalize_number(request.to_number)
        from_number = normalize_number(request.from_number)
        if not to_number or not from_number:
            raise ValidationError("Both to_number and from_number are required")

        calls_log.info("Initiating call from %s to %s", from_number, to_number)

        session = await self.voice_agent.register_session(from_number, to_number)
        calls_log.info("Retell call registered: %s", session.raw or session.session_id)

        base_url = base_url.rstrip("/")
        answer_url = f"{base_url}/answer?call_id={quote(session.session_id, safe='')}"
        hangup_url = f"{base_url}/hangup"
        calls_log.info("Using server URL: %s", base_url)
        calls_log.info("Using answer URL: %s", answer_url)

        try:
            carrier_call_id = await self.telephony.place_call(
                from_number,
                to_number,
                answer_url,
                CallConfig(hangup_url=hangup_url, ring_timeout=self.ring_timeout),
            )
        except UpstreamError:
            # The Retell session stays registered; it expires on the provider side.
            logger.warning("Dial failed; Retell session %s left registered", session.session_id)
            raise

        record = CallRecord(
            carrier_call_id=carrier_call_id,
            voice_agent_session_id=session.session_id,
            from_number=from_number,
            to_number=to_number,
        )
        calls_log.info(record.model_dump_json())

        return CallInitiationResult(carrier_call_id=carrier_call_id, session_id=session.session_id)
