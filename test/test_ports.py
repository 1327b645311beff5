"""Unit tests for port allocation."""

import socket
import threading

import pytest

from common.ports import PortAllocator, PortExhaustedError, next_port, port_is_free


@pytest.mark.unit
class TestPortIsFree:
    """Tests for the bind probe."""

    def test_listening_port_is_busy(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("127.0.0.1", 0))
            holder.listen(1)
            port = holder.getsockname()[1]
            assert port_is_free("127.0.0.1", port) is False


@pytest.mark.unit
class TestPortAllocator:
    """Tests for PortAllocator."""

    def test_sequential_ports_increase(self, port_allocator) -> None:
        first = port_allocator.next_port()
        second = port_allocator.next_port()
        assert second > first

    def test_skips_busy_port(self, port_allocator) -> None:
        busy = port_allocator.next_port() + 1
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("127.0.0.1", busy))
            holder.listen(1)
            assert port_allocator.next_port() > busy

    def test_concurrent_allocation_is_unique(self, port_allocator) -> None:
        ports: list[int] = []
        lock = threading.Lock()

        def grab() -> None:
            for _ in range(10):
                port = port_allocator.next_port()
                with lock:
                    ports.append(port)

        threads = [threading.Thread(target=grab) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ports) == 80
        assert len(set(ports)) == 80

    def test_exhausted(self, port_allocator) -> None:
        start = port_allocator.next_port()
        allocator = PortAllocator(start=start, end=start)
        assert allocator.next_port() == start
        with pytest.raises(PortExhaustedError):
            allocator.next_port()

    def test_invalid_range(self) -> None:
        with pytest.raises(ValueError):
            PortAllocator(start=5000, end=4000)
        with pytest.raises(ValueError):
            PortAllocator(start=0)

    def test_default_allocator(self) -> None:
        assert next_port() != next_port()
