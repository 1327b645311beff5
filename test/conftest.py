"""pytest configuration and fixtures for handshake-testkit tests.

Provides:
- MockLinePort / mock_port: In-memory client port for unit tests
- port_allocator: Allocator private to one test
- fake_server: Factory for HandshakeFakeServer, closed and joined on teardown
- client_port: Factory for pyserial socket:// ports dialed into a server
- wait_until: Poll a condition from the test thread
- Markers for unit vs integration tests
"""

import time
from collections.abc import Callable, Generator
from typing import Any

import pytest
import serial

from client.shutdown import client_close
from common.device import open_socket_port
from common.ports import PortAllocator, default_port_allocator
from server.fake import HandshakeFakeServer

JOIN_TIMEOUT_S = 5.0


class MockLinePort:
    """Mock client port for unit testing.

    Reads come from data injected with inject(); writes are collected in
    `written`. An exhausted buffer behaves like a read timeout, or like a
    dropped connection once disconnect() has been called.
    """

    def __init__(self) -> None:
        self._incoming = bytearray()
        self._disconnected = False
        self.written = bytearray()
        self.closed = False

    def inject(self, data: bytes) -> None:
        """Inject data as if received from the server."""
        self._incoming.extend(data)

    def disconnect(self) -> None:
        self._disconnected = True

    def read_until(self, expected: bytes = b"\n", size: int | None = None, /) -> bytes:
        idx = self._incoming.find(expected)
        if idx < 0:
            if self._disconnected:
                raise serial.SerialException("socket disconnected")
            data = bytes(self._incoming)
            self._incoming.clear()
            return data
        end = idx + len(expected)
        data = bytes(self._incoming[:end])
        del self._incoming[:end]
        return data

    def write(self, data: bytes, /) -> int:
        if self._disconnected:
            raise serial.SerialException("socket connection failed")
        self.written.extend(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def mock_port() -> MockLinePort:
    return MockLinePort()


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (uses loopback sockets)")


@pytest.fixture
def port_allocator() -> PortAllocator:
    """Allocator that shares the default counter's range but not its state.

    Starts past the default allocator's next port so both can be used in
    the same process without clashing.
    """
    return PortAllocator(start=default_port_allocator.next_port() + 500)


@pytest.fixture
def fake_server() -> Generator[Callable[..., HandshakeFakeServer], None, None]:
    """Factory creating fake servers; every server is closed and joined on teardown."""
    servers: list[HandshakeFakeServer] = []

    def make(*args: Any, **kwargs: Any) -> HandshakeFakeServer:
        server = HandshakeFakeServer(*args, **kwargs)
        servers.append(server)
        return server

    yield make

    for server in servers:
        server.close()
    for server in servers:
        server.join(JOIN_TIMEOUT_S)


@pytest.fixture
def client_port() -> Generator[Callable[..., serial.SerialBase], None, None]:
    """Factory opening client ports; every port is closed on teardown."""
    ports: list[serial.SerialBase] = []

    def connect(port: int, timeout_s: float = 2.0) -> serial.SerialBase:
        ser = open_socket_port(port, timeout_s=timeout_s)
        ports.append(ser)
        return ser

    yield connect

    for ser in ports:
        client_close(ser)


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Return a poller: wait_until(predicate, timeout_s=5.0) -> bool."""

    def poll(predicate: Callable[[], bool], timeout_s: float = JOIN_TIMEOUT_S) -> bool:
        deadline = time.monotonic() + timeout_s
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return poll
