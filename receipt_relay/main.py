"""receipt-relay entry point: wires everything together and serves HTTP."""

from __future__ import annotations

import asyncio
import signal
import sys

import click

from receipt_relay import __version__
from receipt_relay.config import Settings, load_settings
from receipt_relay.delivery import DeliveryChannel, WebSocketConnector
from receipt_relay.rendering import create_renderer
from receipt_relay.server import RelayServer
from receipt_relay.upload import HttpUploader, Uploader
from receipt_relay.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


def build_server(settings: Settings) -> RelayServer:
    channel = DeliveryChannel(
        WebSocketConnector(),
        timeout_ms=settings.delivery.timeout_ms,
        close_timeout_ms=settings.delivery.close_timeout_ms,
    )
    uploader: Uploader | None = None
    if settings.upload.enabled:
        uploader = HttpUploader(settings.upload)
    if not settings.renderer.escape_html:
        log.info("receipt_fields_unescaped", renderer=settings.renderer.backend)
    return RelayServer(
        settings.server,
        settings.delivery,
        channel,
        create_renderer(settings.renderer),
        uploader,
    )


async def run(settings: Settings) -> None:
    server = build_server(settings)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    log.info("receipt_relay_starting", version=__version__)
    await server.start()

    try:
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await server.stop()


@click.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--port", default=None, type=int, help="Port to listen on")
def cli(config_path: str | None, log_level: str | None, port: int | None) -> None:
    """Start the receipt-relay HTTP service."""
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    if port is not None:
        settings.server.port = port
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    asyncio.run(run(settings))


if __name__ == "__main__":
    cli()
