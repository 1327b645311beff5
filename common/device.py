"""Client port setup for handshake-testkit.

Contains:
- socket_url: Build a pyserial socket:// URL for a host/port
- SocketLinePort: pyserial socket:// port that keeps input received during open
- open_socket_port: Open a SocketLinePort dialed into a TCP server
"""

import logging

import serial
from serial.urlhandler.protocol_socket import Serial as SocketSerial

from common.protocol import DEFAULT_CLIENT_TIMEOUT_S, DEFAULT_HOST

logger = logging.getLogger(__name__)


def socket_url(port: int, host: str = DEFAULT_HOST) -> str:
    """Return the pyserial URL for a raw TCP connection."""
    return f"socket://{host}:{port}"


class SocketLinePort(SocketSerial):
    """pyserial socket:// port for line protocols.

    The stock handler flushes pending input at the end of open(). A server
    that greets immediately after accept can get its greeting in before
    that flush, so input is kept while opening.
    """

    _opening = False

    def open(self) -> None:
        self._opening = True
        try:
            super().open()
        finally:
            self._opening = False

    def reset_input_buffer(self) -> None:
        if self._opening:
            return
        super().reset_input_buffer()


def open_socket_port(
    port: int,
    host: str = DEFAULT_HOST,
    timeout_s: float = DEFAULT_CLIENT_TIMEOUT_S,
) -> serial.SerialBase:
    """Open a client port connected to host:port.

    Reads return short after timeout_s. Raises serial.SerialException if
    the connection is refused.
    """
    url = socket_url(port, host)
    ser = SocketLinePort(url, timeout=timeout_s, write_timeout=timeout_s)
    logger.debug(f"Opened {url} (timeout={timeout_s}s)")
    return ser
