"""Receipt renderers."""

from receipt_relay.config import RendererConfig
from receipt_relay.rendering.base import RenderedImage, Renderer
from receipt_relay.rendering.browser import BrowserRenderer
from receipt_relay.rendering.svg import SvgRenderer

__all__ = [
    "RenderedImage",
    "Renderer",
    "BrowserRenderer",
    "SvgRenderer",
    "create_renderer",
]


def create_renderer(config: RendererConfig) -> Renderer:
    """Factory to create the configured rendering backend."""
    if config.backend == "svg":
        return SvgRenderer(escape_html=config.escape_html)
    return BrowserRenderer(config)
