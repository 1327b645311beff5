"""Client-side handshake functions for handshake-testkit.

Implements the client side of the connect handshake, enough to drive the
fake server in tests:
  1. Read INFO greeting
  2. Send CONNECT with options
  3. Send PING
  4. Wait for PONG
"""

import logging

import serial

from common.connection import HandshakeError, ServerInfo
from common.encoding import (
    EncodingError,
    decode_info,
    decode_line,
    encode_json,
    encode_line,
)
from common.protocol import CONNECT, CRLF_BYTES, INFO, PING, PONG, TRACE, LinePort

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_OPTIONS = {"verbose": False, "pedantic": False, "name": "handshake-testkit"}


def client_read_line(port: LinePort) -> str:
    """Read one CRLF-terminated line.

    Raises HandshakeError on timeout, disconnect or undecodable input.
    """
    try:
        raw = port.read_until(CRLF_BYTES)
    except serial.SerialException as e:
        raise HandshakeError(f"Client: connection lost: {e}")

    if not raw.endswith(CRLF_BYTES):
        raise HandshakeError(f"Client: timeout waiting for line (got {raw!r})")

    try:
        line = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HandshakeError(f"Client: undecodable line: {e}")

    logger.log(TRACE, f"Client: received {line.rstrip()!r}")
    return line


def client_write_line(port: LinePort, line: str) -> None:
    """Write one line. Raises HandshakeError if the connection is gone."""
    try:
        port.write(line.encode("utf-8"))
    except serial.SerialException as e:
        raise HandshakeError(f"Client: write failed: {e}")
    logger.log(TRACE, f"Client: sent {line.rstrip()!r}")


def client_read_info(port: LinePort) -> dict:
    """Wait for the INFO greeting and return its payload."""
    try:
        keyword, rest = decode_line(client_read_line(port))
        if keyword != INFO:
            raise HandshakeError(f"Client: expected {INFO}, got {keyword!r}")
        info = decode_info(rest)
    except EncodingError as e:
        raise HandshakeError(f"Client: bad greeting: {e}")

    logger.info(f"Client: received INFO (server_id={info.get('server_id')})")
    return info


def client_send_connect(port: LinePort, options: dict | None = None) -> None:
    """Send CONNECT with JSON options."""
    if options is None:
        options = DEFAULT_CONNECT_OPTIONS
    client_write_line(port, encode_line(CONNECT, encode_json(options)))
    logger.info("Client: sent CONNECT")


def client_send_ping(port: LinePort) -> None:
    client_write_line(port, encode_line(PING))


def client_wait_pong(port: LinePort) -> None:
    """Wait for PONG. Raises HandshakeError on anything else."""
    try:
        keyword, _ = decode_line(client_read_line(port))
    except EncodingError as e:
        raise HandshakeError(f"Client: bad reply to PING: {e}")

    if keyword != PONG:
        raise HandshakeError(f"Client: expected {PONG}, got {keyword!r}")
    logger.info("Client: received PONG, connection established")


def client_handshake(port: LinePort, options: dict | None = None) -> ServerInfo:
    """Perform the client-side handshake.

    1. Read INFO
    2. Send CONNECT, then PING
    3. Wait for PONG

    Returns ServerInfo on success.
    Raises HandshakeError on failure.
    """
    info = client_read_info(port)
    client_send_connect(port, options)
    client_send_ping(port)
    client_wait_pong(port)
    return ServerInfo(server_id=info.get("server_id"), raw=info)
