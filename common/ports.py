"""Port allocation for handshake-testkit.

Contains:
- PortExhaustedError: Raised when the allocator runs out of ports
- port_is_free: Probe whether a TCP port can be bound
- PortAllocator: Thread-safe counter handing out unused ports
- default_port_allocator / next_port: Process-wide allocator, created at import
"""

import logging
import socket
import threading

from common.protocol import DEFAULT_HOST, DEFAULT_PORT_BASE, MAX_PORT

logger = logging.getLogger(__name__)


class PortExhaustedError(RuntimeError):
    """Raised when no free port remains in the allocator's range."""

    pass


def port_is_free(host: str, port: int) -> bool:
    """Return True if a listening socket could be bound on (host, port) right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            probe.bind((host, port))
        except OSError:
            return False
    return True


class PortAllocator:
    """Hands out increasing port numbers, skipping ports already in use.

    A port is handed out at most once per allocator, so servers created
    concurrently from the same allocator never share a port.
    """

    def __init__(
        self,
        start: int = DEFAULT_PORT_BASE,
        end: int = MAX_PORT,
        host: str = DEFAULT_HOST,
    ) -> None:
        if not 0 < start <= end <= MAX_PORT:
            raise ValueError(f"Invalid port range {start}-{end}")
        self._next = start
        self._end = end
        self._host = host
        self._lock = threading.Lock()

    def next_port(self) -> int:
        """Return the next unused port. Raises PortExhaustedError when the range is spent."""
        with self._lock:
            while self._next <= self._end:
                port = self._next
                self._next += 1
                if port_is_free(self._host, port):
                    return port
                logger.debug(f"Port {port} busy, skipping")

        raise PortExhaustedError(f"No free port left up to {self._end}")


default_port_allocator = PortAllocator()


def next_port() -> int:
    """Return a fresh port from the process-wide allocator."""
    return default_port_allocator.next_port()
