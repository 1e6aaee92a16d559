"""Call initiation endpoint and the operator console that drives it."""

from html import escape

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..config import Settings, get_settings
from ..handlers.orchestrator import CallOrchestrator
from ..schemas import CallInitiationRequest, CallInitiationResponse, ErrorResponse
from .deps import get_base_url, get_orchestrator, read_payload

router = APIRouter()


@router.post(
    "/make-outbound-call",
    response_model=CallInitiationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def make_outbound_call(
    request: Request,
    orchestrator: CallOrchestrator = Depends(get_orchestrator),
    base_url: str = Depends(get_base_url),
) -> CallInitiationResponse:
    """Register a Retell session and have Plivo dial `to_number`.

    Validation and upstream failures are turned into JSON error bodies by
    the exception handlers installed in `main.create_app`.
    """
    payload = await read_payload(request)
    body = CallInitiationRequest(
        to_number=_text(payload.get("to_number")),
        from_number=_text(payload.get("from_number")),
    )
    result = await orchestrator.initiate_call(body, base_url)
    return CallInitiationResponse(call_uuid=result.carrier_call_id, retell_call_id=result.session_id)


def _text(value):
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def console(settings: Settings = Depends(get_settings)) -> HTMLResponse:
    from_number = escape(settings.default_from_number or "", quote=True)
    return HTMLResponse(CONSOLE_HTML.replace("{from_number}", from_number))


CONSOLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>AI Outbound Caller</title>
  <style>
    body { font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; }
    label { display: block; margin: 10px 0 5px; }
    input { width: 100%; padding: 8px; box-sizing: border-box; }
    button { margin-top: 15px; padding: 10px 15px; }
    pre { background: #f4f4f4; padding: 10px; }
  </style>
</head>
<body>
  <h1>Make AI Outbound Call</h1>
  <form id="callForm">
    <label for="to_number">Recipient Number (with country code):</label>
    <input type="text" id="to_number" name="to_number" placeholder="+1XXXXXXXXXX" required>
    <label for="from_number">Your Plivo Number (with country code):</label>
    <input type="text" id="from_number" name="from_number" value="{from_number}" required>
    <button type="submit">Make Call</button>
  </form>
  <pre id="response" hidden></pre>
  <script>
    document.getElementById('callForm').addEventListener('submit', async (e) => {
      e.preventDefault();
      const out = document.getElementById('response');
      try {
        const resp = await fetch('/make-outbound-call', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({
            to_number: document.getElementById('to_number').value,
            from_number: document.getElementById('from_number').value
          })
        });
        out.textContent = JSON.stringify(await resp.json(), null, 2);
      } catch (err) {
        out.textContent = 'An error occurred while making the request.';
      }
      out.hidden = false;
    });
  </script>
</body>
</html>
"""
