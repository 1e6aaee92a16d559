"""Pydantic schemas for call setup, webhook payloads and responses."""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class CallInitiationRequest(BaseModel):
    """Body of `POST /make-outbound-call`.

    Both fields are optional here so the orchestrator, not request parsing,
    decides what a missing number means.
    """

    to_number: str | None = None
    from_number: str | None = None


class CallInitiationResult(BaseModel):
    carrier_call_id: str
    session_id: str


class VoiceAgentSession(BaseModel):
    """A call registered with the voice agent provider."""

    session_id: str
    raw: Dict[str, Any] = Field(default_factory=dict)


class CallConfig(BaseModel):
    hangup_url: str
    ring_timeout: int = 30


class CallRecord(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    carrier_call_id: str
    voice_agent_session_id: str
    from_number: str
    to_number: str


# ---------------------------------------------------------------------------
# Carrier webhooks. Plivo posts capitalised form fields; anything else is
# ignored.
# ---------------------------------------------------------------------------

class _PlivoEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]):
        """Build the event from a loosely typed webhook body.

        Plivo sends every field as a string; JSON senders may not, so
        scalars are stringified and nested values dropped.
        """
        fields = {}
        for key, value in payload.items():
            if isinstance(value, (str, int, float, bool)):
                fields[key] = str(value)
        return cls.model_validate(fields)


class AnswerEvent(_PlivoEvent):
    call_uuid: str | None = Field(default=None, alias="CallUUID")
    from_number: str | None = Field(default=None, alias="From")
    to_number: str | None = Field(default=None, alias="To")


class DialStatusEvent(_PlivoEvent):
    dial_status: str | None = Field(default=None, alias="DialStatus")
    call_uuid: str | None = Field(default=None, alias="CallUUID")
    dial_hangup_cause: str | None = Field(default=None, alias="DialHangupCause")


class HangupEvent(_PlivoEvent):
    call_uuid: str | None = Field(default=None, alias="CallUUID")
    bill_duration: str | None = Field(default=None, alias="BillDuration")
    hangup_cause: str | None = Field(default=None, alias="HangupCause")


# ---------------------------------------------------------------------------
# HTTP responses
# ---------------------------------------------------------------------------

class CallInitiationResponse(BaseModel):
    success: bool = True
    call_uuid: str
    retell_call_id: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
    environment: Dict[str, Any]
