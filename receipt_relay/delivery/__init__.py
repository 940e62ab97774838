"""Single-shot message delivery."""

from receipt_relay.delivery.channel import DEFAULT_TIMEOUT_MS, DeliveryChannel
from receipt_relay.delivery.transport import (
    CloseInfo,
    Connection,
    Connector,
    WebSocketConnection,
    WebSocketConnector,
)

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "DeliveryChannel",
    "CloseInfo",
    "Connection",
    "Connector",
    "WebSocketConnection",
    "WebSocketConnector",
]
