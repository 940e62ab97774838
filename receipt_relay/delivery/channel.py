"""Single-shot message delivery over one socket connection with a deadline."""

from __future__ import annotations

import asyncio
import json
from urllib.parse import urlsplit

from receipt_relay.delivery.transport import Connection, Connector, WebSocketConnector
from receipt_relay.errors import (
    DeliveryTimeout,
    InvalidEndpoint,
    PrematureClose,
    TransmitError,
    TransportError,
)
from receipt_relay.models import Failed, Outcome, OutboundMessage, Sent
from receipt_relay.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 8000
DEFAULT_CLOSE_TIMEOUT_MS = 1000


class DeliveryChannel:
    """Sends one message per call. At most once, never retried.

    ``Sent`` only means the transport accepted the frame; nothing is known
    about whether the remote party processed it.
    """

    def __init__(
        self,
        connector: Connector | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        close_timeout_ms: int = DEFAULT_CLOSE_TIMEOUT_MS,
    ) -> None:
        self._connector = connector or WebSocketConnector()
        self._timeout_ms = timeout_ms
        self._close_timeout_ms = close_timeout_ms

    async def deliver(
        self,
        endpoint_address: str | None,
        message: OutboundMessage,
        timeout_ms: int | None = None,
    ) -> Outcome:
        if timeout_ms is None:
            timeout_ms = self._timeout_ms

        if not endpoint_address or not endpoint_address.strip():
            outcome: Outcome = Failed(InvalidEndpoint())
            log.warning(
                "delivery_failed",
                reason=outcome.reason.code,
                correlation_id=message.correlation_id,
            )
            return outcome

        host = urlsplit(endpoint_address).hostname or ""
        outcome = await _Attempt(
            self._connector, endpoint_address, message, timeout_ms, self._close_timeout_ms
        ).run()

        if isinstance(outcome, Sent):
            log.info(
                "delivery_sent",
                kind=message.kind.value,
                correlation_id=message.correlation_id,
                endpoint=host,
            )
        else:
            log.warning(
                "delivery_failed",
                reason=outcome.reason.code,
                detail=str(outcome.reason),
                correlation_id=message.correlation_id,
                endpoint=host,
            )
        return outcome


class _Attempt:
    """State of one ``deliver`` call.

    The connect/send task, the remote-close watcher and the deadline timer all
    race to resolve ``_result``. The first one wins; later ones find the future
    done and do nothing. Everything is torn down in ``run``'s ``finally``.

    ``Sent`` is settled as soon as ``send`` returns. The graceful close that
    follows is cleanup with its own bound and never changes the outcome.
    """

    def __init__(
        self,
        connector: Connector,
        address: str,
        message: OutboundMessage,
        timeout_ms: int,
        close_timeout_ms: int = DEFAULT_CLOSE_TIMEOUT_MS,
    ) -> None:
        self._connector = connector
        self._address = address
        self._message = message
        self._timeout_ms = timeout_ms
        self._close_timeout_ms = close_timeout_ms
        self._connection: Connection | None = None
        self._sent = False
        self._outcome: Outcome | None = None
        self._result: asyncio.Future[Outcome] | None = None
        self._timer: asyncio.TimerHandle | None = None

    async def run(self) -> Outcome:
        loop = asyncio.get_running_loop()
        self._result = loop.create_future()
        self._timer = loop.call_later(self._timeout_ms / 1000, self._on_deadline)
        exchange = asyncio.create_task(self._exchange())
        try:
            return await self._result
        finally:
            self._timer.cancel()
            if not exchange.done():
                exchange.cancel()
            await asyncio.gather(exchange, return_exceptions=True)
            await self._release()

    def _settle(self, outcome: Outcome) -> bool:
        assert self._result is not None
        if self._result.done():
            return False
        if self._timer is not None:
            self._timer.cancel()
        self._outcome = outcome
        self._result.set_result(outcome)
        return True

    def _on_deadline(self) -> None:
        self._settle(Failed(DeliveryTimeout(self._timeout_ms)))

    async def _exchange(self) -> None:
        try:
            connection = await self._connector.connect(self._address)
        except Exception as exc:
            self._settle(Failed(TransportError(exc)))
            return
        self._connection = connection

        watcher = asyncio.create_task(self._watch(connection))
        try:
            try:
                await connection.send(json.dumps(self._message.to_wire()))
            except Exception as exc:
                self._settle(Failed(TransmitError(exc)))
                return
            self._sent = True
            self._settle(Sent(self._message))
        finally:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)

    async def _watch(self, connection: Connection) -> None:
        try:
            info = await connection.wait_closed()
        except Exception as exc:
            self._settle(Failed(TransportError(exc)))
            return
        if not self._sent:
            self._settle(Failed(PrematureClose(info.code, info.reason)))

    async def _release(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        if isinstance(self._outcome, Sent):
            try:
                await asyncio.wait_for(connection.close(), self._close_timeout_ms / 1000)
            except Exception:
                log.warning(
                    "delivery_close_error",
                    correlation_id=self._message.correlation_id,
                    exc_info=True,
                )
            else:
                return
        try:
            await connection.terminate()
        except Exception:
            log.exception("delivery_terminate_error", correlation_id=self._message.correlation_id)
