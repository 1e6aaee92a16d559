"""Error taxonomy for call setup and call-control rendering."""


class CallBridgeError(Exception):
    """Base class for errors raised by the bridge."""


class ValidationError(CallBridgeError):
    """Missing or malformed input on the initiation request."""


class UpstreamError(CallBridgeError):
    """A vendor API rejected a request or could not be reached.

    `str()` is qualified with the provider name so callers can tell a
    voice-agent failure from a carrier failure.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider} API Error: {message}")


class ProtocolRenderError(CallBridgeError):
    """Webhook input that cannot be turned into a call-control document."""
