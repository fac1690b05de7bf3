"""Tests for TcpProber"""

from __future__ import annotations

import asyncio
import socket
from unittest.mock import AsyncMock, MagicMock

import pytest

from netprobe.domain.config import EndpointConfig
from netprobe.domain.models.outcome import Failed, FailureKind, Reachable
from netprobe.infrastructure.prober import TcpProber


def _closed_port() -> int:
    """Return a local port nothing is listening on"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _fake_writer(wait_closed_error: Exception | None = None) -> MagicMock:
    writer = MagicMock()
    writer.wait_closed = AsyncMock(side_effect=wait_closed_error)
    return writer


@pytest.mark.asyncio
async def test_probe_reachable_local_server():
    server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]

    async with server:
        prober = TcpProber(EndpointConfig(host="127.0.0.1", port=port, timeout=2.0))
        outcome = await prober.probe_once()

    assert isinstance(outcome, Reachable)
    assert outcome.elapsed >= 0


@pytest.mark.asyncio
async def test_probe_connection_refused_is_io_error():
    prober = TcpProber(EndpointConfig(host="127.0.0.1", port=_closed_port(), timeout=2.0))

    outcome = await prober.probe_once()

    assert isinstance(outcome, Failed)
    assert outcome.kind is FailureKind.IO_ERROR
    assert outcome.detail


@pytest.mark.asyncio
async def test_probe_timeout():
    cancelled = asyncio.Event()

    async def hanging_open(host, port):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    prober = TcpProber(EndpointConfig(host="example.test", port=443, timeout=0.05), open_connection=hanging_open)

    outcome = await prober.probe_once()

    assert isinstance(outcome, Failed)
    assert outcome.kind is FailureKind.TIMEOUT
    # The in-flight attempt is abandoned once the timeout fires
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_probe_os_error_carries_detail():
    async def failing_open(host, port):
        raise OSError("Network is unreachable")

    prober = TcpProber(EndpointConfig(host="example.test", port=443), open_connection=failing_open)

    outcome = await prober.probe_once()

    assert outcome == Failed(FailureKind.IO_ERROR, detail="Network is unreachable", elapsed=outcome.elapsed)


@pytest.mark.asyncio
async def test_probe_os_error_without_message_uses_type_name():
    async def failing_open(host, port):
        raise ConnectionResetError()

    prober = TcpProber(EndpointConfig(host="example.test", port=443), open_connection=failing_open)

    outcome = await prober.probe_once()

    assert outcome.kind is FailureKind.IO_ERROR
    assert outcome.detail == "ConnectionResetError"


@pytest.mark.asyncio
async def test_probe_closes_connection_on_success():
    writer = _fake_writer()
    calls = []

    async def fake_open(host, port):
        calls.append((host, port))
        return MagicMock(), writer

    prober = TcpProber(EndpointConfig(host="example.test", port=8443), open_connection=fake_open)

    outcome = await prober.probe_once()

    assert isinstance(outcome, Reachable)
    assert calls == [("example.test", 8443)]
    writer.close.assert_called_once()
    writer.wait_closed.assert_awaited_once()
    writer.write.assert_not_called()


@pytest.mark.asyncio
async def test_probe_teardown_error_keeps_reachable():
    writer = _fake_writer(ConnectionResetError("reset by peer"))

    async def fake_open(host, port):
        return MagicMock(), writer

    prober = TcpProber(EndpointConfig(host="example.test", port=443), open_connection=fake_open)

    outcome = await prober.probe_once()

    assert isinstance(outcome, Reachable)


@pytest.mark.asyncio
async def test_unencodable_host_is_io_error():
    """A host name that fails IDNA encoding is a resolution failure"""
    prober = TcpProber(EndpointConfig(host="a" * 64 + ".com", port=443, timeout=1.0))

    outcome = await prober.probe_once()

    assert isinstance(outcome, Failed)
    assert outcome.kind is FailureKind.IO_ERROR
    assert outcome.detail


@pytest.mark.asyncio
async def test_os_level_timeout_is_timeout():
    async def timing_out_open(host, port):
        raise TimeoutError(110, "Connection timed out")

    prober = TcpProber(EndpointConfig(host="example.test", port=443), open_connection=timing_out_open)

    outcome = await prober.probe_once()

    assert isinstance(outcome, Failed)
    assert outcome.kind is FailureKind.TIMEOUT


@pytest.mark.asyncio
async def test_probe_propagates_unexpected_errors():
    async def broken_open(host, port):
        raise ValueError("bad opener")

    prober = TcpProber(EndpointConfig(host="example.test", port=443), open_connection=broken_open)

    with pytest.raises(ValueError, match="bad opener"):
        await prober.probe_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("scenario", ["reachable", "refused", "timeout"])
async def test_probe_always_classifies(scenario):
    """Every attempt yields Reachable or a single Failed kind, never anything else"""
    if scenario == "reachable":
        async def opener(host, port):
            return MagicMock(), _fake_writer()
    elif scenario == "refused":
        async def opener(host, port):
            raise ConnectionRefusedError("Connection refused")
    else:
        async def opener(host, port):
            await asyncio.sleep(10)

    prober = TcpProber(EndpointConfig(host="example.test", port=443, timeout=0.05), open_connection=opener)

    outcome = await prober.probe_once()

    assert isinstance(outcome, (Reachable, Failed))
    if isinstance(outcome, Failed):
        assert outcome.kind in (FailureKind.IO_ERROR, FailureKind.TIMEOUT)
