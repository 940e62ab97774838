"""Headless browser screenshots using Playwright."""

from __future__ import annotations

import asyncio
from typing import Any

from receipt_relay.config import RendererConfig
from receipt_relay.errors import RenderError
from receipt_relay.models import ReceiptFields
from receipt_relay.rendering.base import RenderedImage, Renderer
from receipt_relay.rendering.templates import RECEIPT_HEIGHT, RECEIPT_HTML, RECEIPT_WIDTH
from receipt_relay.utils.logging import get_logger

log = get_logger(__name__)


class BrowserRenderer(Renderer):
    """Loads the receipt HTML into a page and screenshots the receipt element.

    The browser is launched on first use and shared by later renders; each
    render gets its own page.
    """

    def __init__(self, config: RendererConfig | None = None) -> None:
        self._config = config or RendererConfig()
        super().__init__(escape_html=self._config.escape_html)
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def name(self) -> str:
        return "browser"

    @property
    def media_type(self) -> str:
        return "image/jpeg" if self._config.image_type == "jpeg" else "image/png"

    async def _ensure_initialized(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return
            try:
                from playwright.async_api import async_playwright
            except ImportError:
                raise RenderError(
                    "Playwright not installed. Run: pip install playwright && playwright install chromium"
                )

            browser_type = self._config.browser
            try:
                playwright = await async_playwright().start()
            except Exception as e:
                log.exception("browser_launch_error", browser=browser_type)
                raise RenderError(f"Playwright failed to start: {e}") from e

            browser: Any = None
            try:
                launch_kwargs: dict[str, Any] = {"headless": self._config.headless}
                if browser_type == "firefox":
                    browser = await playwright.firefox.launch(**launch_kwargs)
                elif browser_type == "webkit":
                    browser = await playwright.webkit.launch(**launch_kwargs)
                else:
                    browser = await playwright.chromium.launch(**launch_kwargs)

                context = await browser.new_context(
                    viewport={"width": RECEIPT_WIDTH, "height": RECEIPT_HEIGHT},
                )
                context.set_default_timeout(self._config.default_timeout)
            except Exception as e:
                log.exception("browser_launch_error", browser=browser_type)
                try:
                    if browser is not None:
                        await browser.close()
                finally:
                    await playwright.stop()
                raise RenderError(f"Browser launch failed: {e}") from e

            self._playwright = playwright
            self._browser = browser
            self._context = context
            self._initialized = True
            log.info("browser_initialized", browser=browser_type, headless=self._config.headless)

    async def render(self, fields: ReceiptFields) -> RenderedImage:
        await self._ensure_initialized()
        html = RECEIPT_HTML.substitute(self.template_values(fields))

        screenshot_kwargs: dict[str, Any] = {"type": self._config.image_type}
        if self._config.image_type == "jpeg":
            screenshot_kwargs["quality"] = self._config.jpeg_quality

        page = await self._context.new_page()
        try:
            await page.set_content(html, wait_until="networkidle")
            element = await page.query_selector(".receipt-container")
            if element is not None:
                data = await element.screenshot(**screenshot_kwargs)
            else:
                data = await page.screenshot(full_page=True, **screenshot_kwargs)
        except Exception as e:
            log.exception("browser_render_error")
            raise RenderError(str(e)) from e
        finally:
            await page.close()

        log.debug("receipt_rendered", renderer=self.name, size=len(data))
        return RenderedImage(data=data, media_type=self.media_type)

    async def close(self) -> None:
        context, self._context = self._context, None
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        self._initialized = False
        if context:
            await context.close()
        if browser:
            await browser.close()
        if playwright:
            await playwright.stop()
