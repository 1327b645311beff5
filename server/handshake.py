"""Server-side handshake stages for handshake-testkit.

Implements the server side of the connect handshake:
  1. Accept one client
  2. Send INFO greeting
  3. Wait for CONNECT
  4. Wait for PING
  5. Send PONG
"""

import logging
import socket
import threading
import time

from common.connection import Connection
from common.encoding import (
    EncodingError,
    TransportError,
    encode_info,
    encode_line,
    expect_keyword,
)
from common.protocol import (
    ACCEPT_POLL_S,
    CONNECT,
    DEFAULT_ACCEPT_TIMEOUT_S,
    PING,
    PONG,
    SERVER_INFO,
    TRACE,
)

logger = logging.getLogger(__name__)


def server_listen(host: str, port: int) -> socket.socket:
    """Bind a listening socket for a single client."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind((host, port))
        listener.listen(1)
    except OSError:
        listener.close()
        raise
    return listener


def server_accept(
    listener: socket.socket,
    shutdown: threading.Event,
    timeout_s: float = DEFAULT_ACCEPT_TIMEOUT_S,
) -> Connection | None:
    """Wait for one client connection.

    Returns the Connection on success, or None if shutdown was set first.
    Raises TransportError if no client arrives within timeout_s.
    """
    # Short accept slices so shutdown is noticed while waiting
    listener.settimeout(ACCEPT_POLL_S)
    start = time.monotonic()

    while time.monotonic() - start < timeout_s:
        if shutdown.is_set():
            return None
        try:
            sock, peer = listener.accept()
        except socket.timeout:
            continue

        # Reads after accept block without a deadline
        sock.settimeout(None)
        reader = sock.makefile("r", encoding="utf-8", newline="")
        writer = sock.makefile("w", encoding="utf-8", newline="")
        return Connection(sock=sock, reader=reader, writer=writer, peer=peer)

    raise TransportError(f"Server: timeout ({timeout_s}s) waiting for client")


def server_write_line(conn: Connection, line: str) -> None:
    """Write one line and flush it to the client."""
    conn.writer.write(line)
    conn.writer.flush()
    logger.log(TRACE, f"Server: sent {line.rstrip()!r}")


def server_read_line(conn: Connection) -> str:
    """Read one line from the client.

    Raises TransportError at end of stream, EncodingError on non-UTF-8 input.
    """
    try:
        line = conn.reader.readline()
    except UnicodeDecodeError as e:
        raise EncodingError(f"Line is not valid UTF-8: {e}")

    if not line:
        raise TransportError("Client closed the connection")

    logger.log(TRACE, f"Server: received {line.rstrip()!r}")
    return line


def server_send_info(conn: Connection) -> None:
    """Send the INFO greeting."""
    server_write_line(conn, encode_info(SERVER_INFO))


def server_wait_for_connect(conn: Connection) -> str:
    """Read the CONNECT line. Raises UnexpectedMessageError on anything else."""
    return expect_keyword(server_read_line(conn), CONNECT)


def server_wait_for_ping(conn: Connection) -> str:
    """Read the PING line. Raises UnexpectedMessageError on anything else."""
    return expect_keyword(server_read_line(conn), PING)


def server_send_pong(conn: Connection) -> None:
    """Send the PONG reply."""
    server_write_line(conn, encode_line(PONG))
