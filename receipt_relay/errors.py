"""Error taxonomy for message building, delivery, rendering and upload."""

from __future__ import annotations


class RelayError(Exception):
    """Base class. ``code`` is the stable identifier returned to HTTP clients."""

    code = "relay_error"


# ---------------------------------------------------------------------------
# Request errors (caller supplied something unusable)
# ---------------------------------------------------------------------------

class RequestError(RelayError):
    code = "request_error"


class InvalidEndpoint(RequestError):
    code = "invalid_endpoint"

    def __init__(self, message: str = "Endpoint address is required") -> None:
        super().__init__(message)


class UnsupportedIntent(RequestError):
    code = "unsupported_intent"

    def __init__(self, intent: object) -> None:
        self.intent = intent
        super().__init__(f"Unsupported intent: {intent!r}")


class MissingField(RequestError):
    code = "missing_field"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Missing required field: {name}")


class InvalidField(RequestError):
    code = "invalid_field"

    def __init__(self, name: str, expected: str) -> None:
        self.name = name
        super().__init__(f"Invalid field {name}: expected {expected}")


# ---------------------------------------------------------------------------
# Delivery errors (carried inside Failed outcomes)
# ---------------------------------------------------------------------------

class DeliveryError(RelayError):
    code = "delivery_error"


class TransportError(DeliveryError):
    code = "transport_error"

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"Transport error: {cause}")


class TransmitError(DeliveryError):
    code = "transmit_error"

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"Transmit error: {cause}")


class PrematureClose(DeliveryError):
    code = "premature_close"

    def __init__(self, close_code: int | None, reason: str = "") -> None:
        self.close_code = close_code
        self.reason = reason
        super().__init__(f"Connection closed before send (code={close_code}, reason={reason!r})")


class DeliveryTimeout(DeliveryError):
    code = "timeout"

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms} ms")


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------

class RenderError(RelayError):
    code = "render_error"


class UploadError(RelayError):
    code = "upload_error"
