"""Renderer interface."""

from __future__ import annotations

import base64
import html
from abc import ABC, abstractmethod
from dataclasses import dataclass

from receipt_relay.models import ReceiptFields

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/svg+xml": "svg",
}


@dataclass(frozen=True)
class RenderedImage:
    data: bytes
    media_type: str

    @property
    def file_name(self) -> str:
        return f"receipt.{_EXTENSIONS.get(self.media_type, 'bin')}"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


class Renderer(ABC):
    """Turns receipt fields into image bytes. Callers never see which backend ran."""

    def __init__(self, escape_html: bool = False) -> None:
        self._escape_html = escape_html

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def render(self, fields: ReceiptFields) -> RenderedImage: ...

    async def close(self) -> None:
        """Release backend resources. Override if needed."""

    def template_values(self, fields: ReceiptFields) -> dict[str, str]:
        values = fields.model_dump()
        if self._escape_html:
            values = {k: html.escape(v) for k, v in values.items()}
        return values
