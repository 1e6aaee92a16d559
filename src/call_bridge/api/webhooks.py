"""Webhook endpoints for Plivo call lifecycle events.

Plivo calls these as the call progresses: `/answer` when the callee picks
up, `/dial-status` when the bridged SIP leg ends and `/hangup` when the
whole call is over. The first two must always answer with a well-formed
XML document, otherwise Plivo drops the call.
"""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from ..handlers.call_control import ProtocolRenderer
from ..logs import category_logger
from ..schemas import AnswerEvent, DialStatusEvent, HangupEvent
from .deps import get_base_url, get_renderer, read_payload

webhooks_log = category_logger("webhooks")
calls_log = category_logger("calls")
errors_log = category_logger("errors")

XML_MEDIA_TYPE = "application/xml"

router = APIRouter()


def _xml(content: str) -> Response:
    return Response(content=content, media_type=XML_MEDIA_TYPE)


@router.post("/answer")
async def answer(
    request: Request,
    call_id: Optional[str] = None,
    renderer: ProtocolRenderer = Depends(get_renderer),
    base_url: str = Depends(get_base_url),
) -> Response:
    """Bridge the answered call to the Retell session named by `call_id`."""
    payload = await read_payload(request)
    webhooks_log.info("Call answered. Call ID: %s", call_id)
    webhooks_log.info("Request body from Plivo: %s", json.dumps(payload, default=str))

    if not call_id:
        errors_log.error("No call_id provided in answer webhook")

    event = AnswerEvent.from_payload(payload)
    result = renderer.render_answer(call_id, event.from_number, f"{base_url}/dial-status")
    if not result.ok:
        errors_log.error("Error in answer webhook: %s", result.error)
        return _xml(renderer.render_fallback())

    webhooks_log.info("Responding with XML: %s", result.xml)
    return _xml(result.xml)


@router.post("/dial-status")
async def dial_status(request: Request, renderer: ProtocolRenderer = Depends(get_renderer)) -> Response:
    payload = await read_payload(request)
    webhooks_log.info("Dial status update: %s", json.dumps(payload, default=str))

    event = DialStatusEvent.from_payload(payload)
    result = renderer.render_dial_status(event.dial_status)
    if not result.ok:
        errors_log.error("Error in dial-status webhook: %s", result.error)
        return _xml(renderer.render_fallback())
    return _xml(result.xml)


@router.post("/hangup")
async def hangup(request: Request) -> Response:
    """Record the end of the call. Plivo expects no document here."""
    payload = await read_payload(request)
    webhooks_log.info("Call hung up: %s", json.dumps(payload, default=str))

    event = HangupEvent.from_payload(payload)
    calls_log.info(
        "Call %s ended. Duration: %ss, Reason: %s",
        event.call_uuid,
        event.bill_duration,
        event.hangup_cause,
    )
    return Response(status_code=200, content=b"")
