"""Tests for the single-shot delivery channel."""

import asyncio
import json
from unittest.mock import patch

import pytest

from receipt_relay.builder import build_message
from receipt_relay.delivery import CloseInfo, Connection, Connector, DeliveryChannel
from receipt_relay.errors import (
    DeliveryTimeout,
    InvalidEndpoint,
    PrematureClose,
    TransmitError,
    TransportError,
)
from receipt_relay.models import Failed, Sent


ADDRESS = "wss://chat.example.com/ws/session-1"


class FakeConnection(Connection):
    """Scripted connection that records close/terminate calls."""

    def __init__(
        self,
        *,
        send_error: Exception | None = None,
        send_hangs: bool = False,
        error_after: float | None = None,
        close_after: float | None = None,
        close_delay: float | None = None,
        close_hangs: bool = False,
    ) -> None:
        self.send_error = send_error
        self.send_hangs = send_hangs
        self.error_after = error_after
        self.close_after = close_after
        self.close_delay = close_delay
        self.close_hangs = close_hangs
        self.sent: list[str] = []
        self.close_calls = 0
        self.terminate_calls = 0

    async def send(self, data: str) -> None:
        if self.send_hangs:
            await asyncio.Event().wait()
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    async def wait_closed(self) -> CloseInfo:
        if self.error_after is not None:
            await asyncio.sleep(self.error_after)
            raise ConnectionError("reset by peer")
        if self.close_after is not None:
            await asyncio.sleep(self.close_after)
            return CloseInfo(1001, "going away")
        await asyncio.Event().wait()
        raise AssertionError("unreachable")

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_delay is not None:
            await asyncio.sleep(self.close_delay)
        if self.close_hangs:
            await asyncio.Event().wait()

    async def terminate(self) -> None:
        self.terminate_calls += 1


class FakeConnector(Connector):
    def __init__(
        self,
        connection: FakeConnection | None = None,
        *,
        connect_error: Exception | None = None,
        connect_hangs: bool = False,
    ) -> None:
        self.connection = connection or FakeConnection()
        self.connect_error = connect_error
        self.connect_hangs = connect_hangs
        self.attempts: list[str] = []

    async def connect(self, address: str) -> Connection:
        self.attempts.append(address)
        if self.connect_hangs:
            await asyncio.Event().wait()
        if self.connect_error is not None:
            raise self.connect_error
        return self.connection


@pytest.fixture
def message():
    return build_message(
        "success",
        {"orderReference": "ORD-1", "amount": "500.00", "transactionReference": "TXN-9"},
    )


class TestInvalidEndpoint:
    @pytest.mark.parametrize("address", ["", "   ", None])
    async def test_fails_without_connecting(self, address, message):
        connector = FakeConnector()
        channel = DeliveryChannel(connector)
        outcome = await channel.deliver(address, message, 1000)
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.reason, InvalidEndpoint)
        assert connector.attempts == []

    async def test_no_timer_started(self, message):
        connector = FakeConnector()
        channel = DeliveryChannel(connector)
        loop = asyncio.get_running_loop()
        with patch.object(loop, "call_later", wraps=loop.call_later) as call_later:
            outcome = await channel.deliver("", message, 1000)
        assert isinstance(outcome.reason, InvalidEndpoint)
        call_later.assert_not_called()


class TestSuccess:
    async def test_sent_and_closed_gracefully(self, message):
        connection = FakeConnection()
        connector = FakeConnector(connection)
        outcome = await DeliveryChannel(connector).deliver(ADDRESS, message, 1000)

        assert isinstance(outcome, Sent)
        assert outcome.message is message
        assert outcome.unwrap() is message
        assert connector.attempts == [ADDRESS]
        assert connection.close_calls == 1
        assert connection.terminate_calls == 0

    async def test_single_json_frame(self, message):
        connection = FakeConnection()
        await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 1000)

        assert len(connection.sent) == 1
        frame = json.loads(connection.sent[0])
        assert frame == message.to_wire()
        assert frame["type"] == "text"
        assert frame["sendStatus"] == 0
        assert frame["self"] is True

    async def test_timer_cancelled_after_success(self, message):
        channel = DeliveryChannel(FakeConnector(), timeout_ms=50)
        outcome = await channel.deliver(ADDRESS, message)
        await asyncio.sleep(0.1)
        assert isinstance(outcome, Sent)

    async def test_close_error_still_reports_sent(self, message):
        connection = FakeConnection()

        async def broken_close() -> None:
            connection.close_calls += 1
            raise ConnectionError("close handshake failed")

        connection.close = broken_close
        outcome = await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 1000)
        assert isinstance(outcome, Sent)
        assert connection.terminate_calls == 1

    async def test_slow_close_past_deadline_is_still_sent(self, message):
        connection = FakeConnection(close_delay=0.15)
        channel = DeliveryChannel(FakeConnector(connection), timeout_ms=50)
        outcome = await channel.deliver(ADDRESS, message)

        assert isinstance(outcome, Sent)
        assert len(connection.sent) == 1
        assert connection.close_calls == 1
        assert connection.terminate_calls == 0

    async def test_unanswered_close_is_bounded_then_terminated(self, message):
        connection = FakeConnection(close_hangs=True)
        channel = DeliveryChannel(FakeConnector(connection), timeout_ms=1000, close_timeout_ms=30)
        outcome = await asyncio.wait_for(channel.deliver(ADDRESS, message), 1.0)

        assert isinstance(outcome, Sent)
        assert connection.close_calls == 1
        assert connection.terminate_calls == 1


class TestFailures:
    async def test_connect_error(self, message):
        connector = FakeConnector(connect_error=OSError("connection refused"))
        outcome = await DeliveryChannel(connector).deliver(ADDRESS, message, 1000)
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.reason, TransportError)
        assert isinstance(outcome.reason.cause, OSError)
        assert connector.connection.terminate_calls == 0

    async def test_transmit_error_terminates(self, message):
        connection = FakeConnection(send_error=RuntimeError("write failed"))
        outcome = await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 1000)
        assert isinstance(outcome.reason, TransmitError)
        assert connection.terminate_calls == 1
        assert connection.close_calls == 0

    async def test_transport_error_during_send(self, message):
        connection = FakeConnection(send_hangs=True, error_after=0.01)
        outcome = await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 1000)
        assert isinstance(outcome.reason, TransportError)
        assert connection.terminate_calls == 1

    async def test_premature_close(self, message):
        connection = FakeConnection(send_hangs=True, close_after=0.01)
        outcome = await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 1000)
        assert isinstance(outcome.reason, PrematureClose)
        assert outcome.reason.close_code == 1001
        assert outcome.reason.reason == "going away"
        assert connection.terminate_calls == 1

    async def test_unwrap_raises_reason(self, message):
        connector = FakeConnector(connect_error=OSError("refused"))
        outcome = await DeliveryChannel(connector).deliver(ADDRESS, message, 1000)
        with pytest.raises(TransportError):
            outcome.unwrap()


class TestDeadline:
    async def test_timeout_terminates_connection(self, message):
        connection = FakeConnection(send_hangs=True)
        outcome = await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 50)
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.reason, DeliveryTimeout)
        assert outcome.reason.timeout_ms == 50
        assert connection.terminate_calls == 1
        assert connection.close_calls == 0

    async def test_timeout_while_connecting(self, message):
        connector = FakeConnector(connect_hangs=True)
        outcome = await DeliveryChannel(connector).deliver(ADDRESS, message, 50)
        assert isinstance(outcome.reason, DeliveryTimeout)
        assert connector.attempts == [ADDRESS]

    async def test_default_timeout_from_channel(self, message):
        connection = FakeConnection(send_hangs=True)
        channel = DeliveryChannel(FakeConnector(connection), timeout_ms=30)
        outcome = await channel.deliver(ADDRESS, message)
        assert outcome.reason.timeout_ms == 30

    async def test_first_event_wins(self, message):
        # Transport error at ~10ms, deadline at 50ms
        connection = FakeConnection(send_hangs=True, error_after=0.01)
        outcome = await DeliveryChannel(FakeConnector(connection)).deliver(ADDRESS, message, 50)
        await asyncio.sleep(0.1)
        assert isinstance(outcome.reason, TransportError)
        assert connection.terminate_calls == 1


class TestIndependence:
    async def test_concurrent_calls_do_not_interfere(self, message):
        good = FakeConnection()
        stuck = FakeConnection(send_hangs=True)
        channel_a = DeliveryChannel(FakeConnector(good))
        channel_b = DeliveryChannel(FakeConnector(stuck))

        sent, timed_out = await asyncio.gather(
            channel_a.deliver(ADDRESS, message, 200),
            channel_b.deliver(ADDRESS, message, 50),
        )
        assert isinstance(sent, Sent)
        assert isinstance(timed_out.reason, DeliveryTimeout)
        assert good.terminate_calls == 0
        assert stuck.terminate_calls == 1

    async def test_same_channel_reused(self, message):
        connector = FakeConnector()
        channel = DeliveryChannel(connector)
        first = await channel.deliver(ADDRESS, message, 200)
        second = await channel.deliver(ADDRESS, message, 200)
        assert isinstance(first, Sent) and isinstance(second, Sent)
        assert connector.attempts == [ADDRESS, ADDRESS]
