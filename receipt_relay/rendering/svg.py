"""SVG document output."""

from __future__ import annotations

from receipt_relay.models import ReceiptFields
from receipt_relay.rendering.base import RenderedImage, Renderer
from receipt_relay.rendering.templates import RECEIPT_SVG


class SvgRenderer(Renderer):
    """Emits the receipt as ``image/svg+xml``. Needs no browser."""

    @property
    def name(self) -> str:
        return "svg"

    async def render(self, fields: ReceiptFields) -> RenderedImage:
        document = RECEIPT_SVG.substitute(self.template_values(fields))
        return RenderedImage(data=document.encode("utf-8"), media_type="image/svg+xml")
