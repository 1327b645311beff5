"""Common modules for handshake-testkit.

This package contains shared code used by both client and server:
- protocol: wire keywords, ExitAt/Progress/Outcome enums, timing constants
- connection: ServerInfo, Connection dataclasses and handshake errors
- encoding: Line and JSON payload encoding/decoding
- ports: PortAllocator and the process-wide default allocator
- device: pyserial socket:// port setup for the reference client
- report: Reporting abstractions
- subject: Sorted subject counters parsed from JSON
"""

from common.connection import (
    Connection,
    HandshakeError,
    ServerInfo,
    UnexpectedMessageError,
)
from common.encoding import EncodingError, TransportError
from common.ports import PortAllocator, PortExhaustedError, next_port
from common.protocol import (
    ACCEPT_POLL_S,
    DEFAULT_ACCEPT_TIMEOUT_S,
    DEFAULT_CLIENT_TIMEOUT_S,
    DEFAULT_HOST,
    ExitAt,
    LinePort,
    Outcome,
    Progress,
)

__all__ = [
    # Protocol
    "ExitAt",
    "Progress",
    "Outcome",
    "LinePort",
    "DEFAULT_HOST",
    "DEFAULT_ACCEPT_TIMEOUT_S",
    "DEFAULT_CLIENT_TIMEOUT_S",
    "ACCEPT_POLL_S",
    # Connection
    "Connection",
    "ServerInfo",
    # Ports
    "PortAllocator",
    "next_port",
    # Exceptions
    "EncodingError",
    "HandshakeError",
    "PortExhaustedError",
    "TransportError",
    "UnexpectedMessageError",
]
