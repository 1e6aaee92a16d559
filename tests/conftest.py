"""Shared fixtures: fake vendor clients and an app wired to them."""

import os
import tempfile

# Keep log files out of the working tree before the app module is imported.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="call-bridge-logs-"))
os.environ.pop("SERVER_URL", None)

import pytest
from fastapi.testclient import TestClient

from call_bridge import logs
from call_bridge.config import Settings
from call_bridge.errors import UpstreamError
from call_bridge.handlers.orchestrator import CallOrchestrator
from call_bridge.main import create_app
from call_bridge.schemas import VoiceAgentSession


class FakeVoiceAgent:
    def __init__(self, calls, session_id="retell-session-1", error=None):
        self.calls = calls
        self.session_id = session_id
        self.error = error
        self.requests = []

    async def register_session(self, from_number, to_number):
        self.calls.append("voice_agent")
        self.requests.append((from_number, to_number))
        if self.error:
            raise self.error
        return VoiceAgentSession(session_id=self.session_id, raw={"call_id": self.session_id})


class FakeTelephony:
    def __init__(self, calls, call_uuid="plivo-uuid-1", error=None):
        self.calls = calls
        self.call_uuid = call_uuid
        self.error = error
        self.requests = []

    async def place_call(self, from_number, to_number, answer_url, config):
        self.calls.append("telephony")
        self.requests.append((from_number, to_number, answer_url, config))
        if self.error:
            raise self.error
        return self.call_uuid


@pytest.fixture
def fresh_logging():
    """Run a test against an unconfigured sink, then restore the session's."""
    previous = logs.log_dir()
    logs.reset_logging()
    yield
    logs.reset_logging()
    logs.configure_logging(Settings(log_dir=str(previous)) if previous else Settings())


@pytest.fixture
def call_order():
    return []


@pytest.fixture
def voice_agent(call_order):
    return FakeVoiceAgent(call_order)


@pytest.fixture
def telephony(call_order):
    return FakeTelephony(call_order)


@pytest.fixture
def orchestrator(voice_agent, telephony):
    return CallOrchestrator(voice_agent, telephony, ring_timeout=30)


@pytest.fixture
def settings():
    return Settings(server_url="https://bridge.example.com", default_from_number="+15557654321")


@pytest.fixture
def client(settings, orchestrator):
    app = create_app(settings=settings, orchestrator=orchestrator)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def retell_failure():
    return UpstreamError("Retell", "Invalid API key", status_code=401)


@pytest.fixture
def plivo_failure():
    return UpstreamError("Plivo", "insufficient balance", status_code=402)
