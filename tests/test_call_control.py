"""Tests for the Plivo call-control XML renderer."""

import xml.etree.ElementTree as ET

from call_bridge.handlers.call_control import (
    DIAL_FAILED_MESSAGE,
    FALLBACK_MESSAGE,
    GREETING,
    MISSING_SESSION_MESSAGE,
    PlivoXMLRenderer,
    sip_target,
)

DIAL_ACTION = "https://bridge.example.com/dial-status"


def parse(xml: str) -> ET.Element:
    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    return ET.fromstring(xml.split("\n", 1)[1])


def verbs(root: ET.Element) -> list:
    return [child.tag for child in root]


class TestAnswer:
    """Answer webhook documents."""

    def test_bridges_to_retell_sip_target(self):
        result = PlivoXMLRenderer().render_answer("abc123", "+15557654321", DIAL_ACTION)
        assert result.ok
        root = parse(result.xml)

        assert root.tag == "Response"
        assert verbs(root) == ["Speak", "Dial"]
        assert root.find("Speak").text == GREETING

        dial = root.find("Dial")
        assert dial.get("callerId") == "+15557654321"
        assert dial.get("timeLimit") == "3600"
        assert dial.get("action") == DIAL_ACTION
        assert dial.get("method") == "POST"
        assert dial.find("User").text == "sip:abc123@sip.usw2.vocode.retellai.com"

    def test_missing_session_speaks_error_and_hangs_up(self):
        for session_id in (None, "", "   "):
            result = PlivoXMLRenderer().render_answer(session_id, "+15557654321", DIAL_ACTION)
            assert result.ok
            root = parse(result.xml)
            assert verbs(root) == ["Speak", "Hangup"]
            assert root.find("Speak").text == MISSING_SESSION_MESSAGE
            assert root.find("Dial") is None

    def test_caller_id_omitted_when_unknown(self):
        result = PlivoXMLRenderer().render_answer("abc123", None, DIAL_ACTION)
        dial = parse(result.xml).find("Dial")
        assert "callerId" not in dial.attrib

    def test_custom_domain_and_time_limit(self):
        renderer = PlivoXMLRenderer(sip_domain="sip.example.net", time_limit=600)
        dial = parse(renderer.render_answer("s-1", None, DIAL_ACTION).xml).find("Dial")
        assert dial.get("timeLimit") == "600"
        assert dial.find("User").text == "sip:s-1@sip.example.net"

    def test_malformed_session_id_is_an_error_result(self):
        result = PlivoXMLRenderer().render_answer("abc<123>@evil", None, DIAL_ACTION)
        assert not result.ok
        assert result.xml == ""
        assert "abc<123>@evil" in str(result.error)

    def test_action_url_is_escaped(self):
        result = PlivoXMLRenderer().render_answer("abc123", None, "https://h/dial-status?a=1&b=2")
        assert "a=1&amp;b=2" in result.xml
        assert parse(result.xml).find("Dial").get("action") == "https://h/dial-status?a=1&b=2"


class TestDialStatus:
    """Dial-status webhook documents."""

    def test_completed_hangs_up_silently(self):
        root = parse(PlivoXMLRenderer().render_dial_status("completed").xml)
        assert verbs(root) == ["Hangup"]

    def test_other_statuses_speak_then_hang_up(self):
        for status in ("failed", "busy", "no-answer", "", None):
            root = parse(PlivoXMLRenderer().render_dial_status(status).xml)
            assert verbs(root) == ["Speak", "Hangup"]
            assert root.find("Speak").text == DIAL_FAILED_MESSAGE


class TestFallback:
    def test_fallback_speaks_generic_error_then_hangs_up(self):
        root = parse(PlivoXMLRenderer().render_fallback())
        assert verbs(root) == ["Speak", "Hangup"]
        assert root.find("Speak").text == FALLBACK_MESSAGE


def test_sip_target():
    assert sip_target("abc123") == "sip:abc123@sip.usw2.vocode.retellai.com"
