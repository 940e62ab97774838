"""Socket transport seam: connectors open connections, connections carry one frame."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import aiohttp

from receipt_relay.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class CloseInfo:
    code: int | None
    reason: str = ""


class Connection(ABC):
    @abstractmethod
    async def send(self, data: str) -> None: ...

    @abstractmethod
    async def wait_closed(self) -> CloseInfo:
        """Return once the remote end closes. Raise if the transport fails."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Graceful close handshake."""
        ...

    @abstractmethod
    async def terminate(self) -> None:
        """Drop the connection without a close handshake."""
        ...


class Connector(ABC):
    @abstractmethod
    async def connect(self, address: str) -> Connection: ...


# ---------------------------------------------------------------------------
# aiohttp WebSocket client
# ---------------------------------------------------------------------------

_CLOSE_TYPES = (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED)


class WebSocketConnection(Connection):
    """A client WebSocket that owns its session."""

    def __init__(self, session: aiohttp.ClientSession, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._session = session
        self._ws = ws

    async def send(self, data: str) -> None:
        await self._ws.send_str(data)

    async def wait_closed(self) -> CloseInfo:
        while True:
            msg = await self._ws.receive()
            if msg.type in _CLOSE_TYPES:
                code = msg.data if isinstance(msg.data, int) else self._ws.close_code
                return CloseInfo(code=code, reason=str(msg.extra or ""))
            if msg.type == aiohttp.WSMsgType.ERROR:
                raise ConnectionError(str(self._ws.exception() or msg.data))
            # Inbound frames are not part of a single-shot exchange
            log.debug("ws_frame_ignored", type=msg.type.name)

    async def close(self) -> None:
        try:
            await self._ws.close()
        finally:
            await self._session.close()

    async def terminate(self) -> None:
        # Closing the session closes the underlying transport immediately
        await self._session.close()


class WebSocketConnector(Connector):
    def __init__(
        self,
        headers: dict[str, str] | None = None,
        max_msg_size: int = 4 * 1024 * 1024,
    ) -> None:
        self._headers = headers or {}
        self._max_msg_size = max_msg_size

    async def connect(self, address: str) -> Connection:
        session = aiohttp.ClientSession()
        kwargs: dict[str, Any] = {
            "headers": self._headers,
            "autoclose": True,
            "autoping": True,
            "max_msg_size": self._max_msg_size,
        }
        try:
            ws = await session.ws_connect(address, **kwargs)
        except BaseException:
            await session.close()
            raise
        return WebSocketConnection(session, ws)
