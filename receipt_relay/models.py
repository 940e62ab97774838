"""Typed message, outcome and receipt models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from receipt_relay.errors import RelayError


class MessageKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class Intent(str, Enum):
    SUCCESS = "success"
    CANCEL = "cancel"
    IMAGE = "image"


# Remote side advances this; we only ever send "unsent"
DELIVERY_STATE_PENDING = 0


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class ImageBody:
    media_type: str
    content_b64: str = ""
    url: str | None = None


@dataclass(frozen=True)
class OutboundMessage:
    kind: MessageKind
    correlation_id: str
    order_reference: str | None
    body: TextBody | ImageBody
    origin_client: str
    created_at_millis: int
    is_self_authored: bool = True
    delivery_state: int = DELIVERY_STATE_PENDING

    def to_wire(self) -> dict[str, Any]:
        """JSON object sent as the single text frame of a delivery."""
        wire: dict[str, Any] = {
            "type": self.kind.value,
            "uuid": self.correlation_id,
            "orderNo": self.order_reference,
            "self": self.is_self_authored,
            "clientType": self.origin_client,
            "createTime": self.created_at_millis,
            "sendStatus": self.delivery_state,
        }
        if isinstance(self.body, ImageBody):
            wire["content"] = self.body.content_b64
            wire["imageType"] = self.body.media_type
            wire["imageUrl"] = self.body.url
        else:
            wire["content"] = self.body.text
        return wire


# ---------------------------------------------------------------------------
# Delivery outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Sent:
    message: OutboundMessage
    ok = True

    def unwrap(self) -> OutboundMessage:
        return self.message


@dataclass(frozen=True)
class Failed:
    reason: RelayError
    ok = False

    def unwrap(self) -> OutboundMessage:
        raise self.reason


Outcome = Union[Sent, Failed]


# ---------------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------------

class ReceiptFields(BaseModel):
    """Values substituted into the receipt layout. Missing values render empty."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    recipient_name: str = Field(default="", alias="recipientName")
    utr: str = ""
    payment_type: str = Field(default="", alias="paymentType")
    amount: str = ""
    date: str = ""
    transaction_id: str = Field(default="", alias="transactionId")
    to_account: str = Field(default="", alias="toAccount")
    ifsc: str = ""
