"""HTTP front end using aiohttp."""

from __future__ import annotations

from typing import Any, Awaitable, Callable
from uuid import uuid4

import structlog
from aiohttp import web
from pydantic import ValidationError

from receipt_relay.builder import build_message
from receipt_relay.config import DeliveryConfig, ServerConfig
from receipt_relay.delivery import DeliveryChannel
from receipt_relay.errors import (
    InvalidEndpoint,
    RelayError,
    RenderError,
    RequestError,
    UploadError,
)
from receipt_relay.models import Failed, Intent, OutboundMessage, ReceiptFields
from receipt_relay.rendering import Renderer
from receipt_relay.upload import Uploader
from receipt_relay.utils.logging import get_logger

log = get_logger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def error_response(status: int, code: str, message: str) -> web.Response:
    return web.json_response(
        {"success": False, "error": code, "message": message},
        status=status,
    )


def status_for(exc: RelayError) -> int:
    if isinstance(exc, RequestError):
        return 400
    if isinstance(exc, (RenderError, UploadError)):
        return 500
    # Delivery failures: the upstream chat socket let us down
    return 502


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    request_id = request.headers.get("X-Request-ID", uuid4().hex[:12])
    with structlog.contextvars.bound_contextvars(request_id=request_id, path=request.path):
        try:
            response = await handler(request)
        except web.HTTPException:
            raise
        except RelayError as e:
            response = error_response(status_for(e), e.code, str(e))
        except Exception as e:
            log.exception("request_error")
            response = error_response(500, "internal_error", str(e))
    response.headers["X-Request-ID"] = request_id
    return response


class RelayServer:
    """Routes requests to the renderer, message builder and delivery channel."""

    def __init__(
        self,
        config: ServerConfig,
        delivery_config: DeliveryConfig,
        channel: DeliveryChannel,
        renderer: Renderer,
        uploader: Uploader | None = None,
    ) -> None:
        self._config = config
        self._delivery_config = delivery_config
        self._channel = channel
        self._renderer = renderer
        self._uploader = uploader
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.bind, self._config.port)
        await site.start()
        log.info(
            "relay_server_started",
            bind=self._config.bind,
            port=self._config.port,
            renderer=self._renderer.name,
            upload=self._uploader is not None,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        await self._renderer.close()
        if self._uploader is not None:
            await self._uploader.close()
        log.info("relay_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application(
            middlewares=[error_middleware],
            client_max_size=self._config.client_max_size,
        )
        app.router.add_get("/health", self._handle_health)
        app.router.add_post("/convert-receipt", self._handle_convert_receipt)
        app.router.add_post("/send-message", self._handle_send_message)
        app.router.add_post("/send-receipt", self._handle_send_receipt)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    async def _handle_convert_receipt(self, request: web.Request) -> web.Response:
        payload = await self._read_json(request)
        if payload is None:
            return error_response(400, "invalid_json", "Request body must be a JSON object")

        fields = self._receipt_fields(payload)
        if fields is None:
            return error_response(400, "invalid_fields", "Receipt fields must be strings")

        image = await self._renderer.render(fields)
        return web.json_response({
            "success": True,
            "mimeType": image.media_type,
            "fileName": image.file_name,
            "base64": image.to_base64(),
        })

    async def _handle_send_message(self, request: web.Request) -> web.Response:
        payload = await self._read_json(request)
        if payload is None:
            return error_response(400, "invalid_json", "Request body must be a JSON object")

        message = build_message(
            payload.get("type", ""),
            {
                "orderReference": payload.get("orderNo", payload.get("orderReference")),
                "amount": payload.get("amount"),
                "transactionReference": payload.get("transactionReference", payload.get("utr")),
            },
            origin_client=self._delivery_config.origin_client,
        )
        return await self._deliver(payload.get("wsUrl"), message)

    async def _handle_send_receipt(self, request: web.Request) -> web.Response:
        payload = await self._read_json(request)
        if payload is None:
            return error_response(400, "invalid_json", "Request body must be a JSON object")

        ws_url = payload.get("wsUrl")
        # Skip the render entirely when there is nowhere to send it
        if not isinstance(ws_url, str) or not ws_url.strip():
            raise InvalidEndpoint()

        receipt = payload.get("receipt", payload)
        fields = self._receipt_fields(receipt) if isinstance(receipt, dict) else None
        if fields is None:
            return error_response(400, "invalid_fields", "Receipt fields must be strings")

        image = await self._renderer.render(fields)
        image_fields: dict[str, Any] = {
            "orderReference": payload.get("orderNo", payload.get("orderReference")),
            "mediaType": image.media_type,
        }
        if self._uploader is not None:
            image_fields["imageUrl"] = await self._uploader.upload(
                image.data, image.media_type, image.file_name
            )
        else:
            image_fields["image"] = image.data

        message = build_message(
            Intent.IMAGE,
            image_fields,
            origin_client=self._delivery_config.origin_client,
        )
        return await self._deliver(ws_url, message)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _deliver(self, ws_url: Any, message: OutboundMessage) -> web.Response:
        address = ws_url if isinstance(ws_url, str) else None
        outcome = await self._channel.deliver(address, message)
        if isinstance(outcome, Failed):
            reason = outcome.reason
            return error_response(status_for(reason), reason.code, str(reason))
        return web.json_response({"success": True, "message": outcome.message.to_wire()})

    async def _read_json(self, request: web.Request) -> dict[str, Any] | None:
        try:
            payload = await request.json()
        except ValueError:
            return None
        return payload if isinstance(payload, dict) else None

    def _receipt_fields(self, payload: dict[str, Any]) -> ReceiptFields | None:
        try:
            return ReceiptFields.model_validate(payload)
        except ValidationError:
            return None
