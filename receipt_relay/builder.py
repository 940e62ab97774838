"""Map a request intent plus free-form fields to an outbound chat message."""

from __future__ import annotations

import base64
import time
from typing import Any, Mapping
from uuid import uuid4

from receipt_relay.errors import InvalidField, MissingField, UnsupportedIntent
from receipt_relay.models import ImageBody, Intent, MessageKind, OutboundMessage, TextBody

SUCCESS_TEMPLATE = (
    "Payment received for order {order_reference}. "
    "Amount: {amount}. Transaction reference: {transaction_reference}."
)
CANCEL_TEXT = "This order has been cancelled. No payment will be processed."

# Tag spellings seen across clients
_INTENT_ALIASES: dict[str, Intent] = {
    "success": Intent.SUCCESS,
    "paid": Intent.SUCCESS,
    "confirm": Intent.SUCCESS,
    "cancel": Intent.CANCEL,
    "cancelled": Intent.CANCEL,
    "image": Intent.IMAGE,
}


def parse_intent(intent: Intent | str | None) -> Intent:
    if isinstance(intent, Intent):
        return intent
    if isinstance(intent, str):
        found = _INTENT_ALIASES.get(intent.strip().lower())
        if found is not None:
            return found
    raise UnsupportedIntent(intent)


def new_correlation_id() -> str:
    return uuid4().hex


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def _require(fields: Mapping[str, Any], name: str) -> Any:
    value = fields.get(name)
    if value is None or value == "" or value == b"":
        raise MissingField(name)
    return value


def _optional_reference(fields: Mapping[str, Any]) -> str | None:
    value = fields.get("orderReference")
    if value is None or value == "":
        return None
    return str(value)


def build_message(
    intent: Intent | str,
    fields: Mapping[str, Any],
    *,
    origin_client: str = "web",
) -> OutboundMessage:
    """Build the message for ``intent``.

    Field names are the wire-level camelCase names (``orderReference``,
    ``amount``, ``transactionReference``, ``image``, ``mediaType``,
    ``imageUrl``). Text values are interpolated verbatim.

    Raises ``UnsupportedIntent``, ``MissingField`` or ``InvalidField``.
    """
    resolved = parse_intent(intent)

    if resolved is Intent.SUCCESS:
        order_reference = str(_require(fields, "orderReference"))
        amount = _require(fields, "amount")
        transaction_reference = _require(fields, "transactionReference")
        kind = MessageKind.TEXT
        body: TextBody | ImageBody = TextBody(
            SUCCESS_TEMPLATE.format(
                order_reference=order_reference,
                amount=amount,
                transaction_reference=transaction_reference,
            )
        )
    elif resolved is Intent.CANCEL:
        order_reference = _optional_reference(fields)
        kind = MessageKind.TEXT
        body = TextBody(CANCEL_TEXT)
    else:
        order_reference = _optional_reference(fields)
        kind = MessageKind.IMAGE
        body = _image_body(fields)

    return OutboundMessage(
        kind=kind,
        correlation_id=new_correlation_id(),
        order_reference=order_reference,
        body=body,
        origin_client=origin_client,
        created_at_millis=now_millis(),
    )


def _image_body(fields: Mapping[str, Any]) -> ImageBody:
    media_type = str(_require(fields, "mediaType"))
    url = fields.get("imageUrl") or None
    image = fields.get("image")
    # A hosted image may be sent by locator alone
    if url is None or image:
        image = _require(fields, "image")
        if not isinstance(image, (bytes, bytearray, memoryview)):
            raise InvalidField("image", "a bytes-like buffer")
        content = base64.b64encode(bytes(image)).decode("ascii")
    else:
        content = ""
    return ImageBody(media_type=media_type, content_b64=content, url=url)
