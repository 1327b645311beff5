"""Protocol definitions for handshake-testkit.

Contains:
- Wire keywords and line terminator
- ExitAt / Progress / Outcome enums for the fake server state machine
- LinePort Protocol for type checking client-side ports
- Timing and port constants
- Logging configuration
"""

import logging
import os
from enum import Enum, IntEnum
from typing import Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Wire keywords
INFO = "INFO"
CONNECT = "CONNECT"
PING = "PING"
PONG = "PONG"

CRLF = "\r\n"
CRLF_BYTES = CRLF.encode("ascii")

# Fixed placeholder sent in the greeting
SERVER_INFO = {"server_id": "test"}


class ExitAt(Enum):
    """Handshake stage at which the fake server deliberately stops."""

    BEFORE_INFO = "before_info"
    AFTER_INFO = "after_info"
    AFTER_CONNECT = "after_connect"
    AFTER_PING = "after_ping"
    NO_EXIT = "no_exit"


class Progress(IntEnum):
    """Furthest handshake stage reached. Ordered, never regresses."""

    NO_CLIENT = 0
    CLIENT_CONNECTED = 1
    SENT_INFO = 2
    GOT_CONNECT = 3
    GOT_PING = 4
    SENT_PONG = 5
    STARTED_CUSTOM_CODE = 6
    COMPLETED_CUSTOM_CODE = 7


class Outcome(Enum):
    """How a fake server run terminated."""

    RUNNING = "running"
    EXITED = "exited"  # Stopped at the configured ExitAt
    CANCELLED = "cancelled"  # close() before any client connected
    COMPLETED = "completed"  # Full handshake, released by close()
    PROTOCOL_VIOLATION = "protocol_violation"
    IO_ERROR = "io_error"
    ERROR = "error"

    @property
    def is_protocol_failure(self) -> bool:
        return self in (Outcome.PROTOCOL_VIOLATION, Outcome.IO_ERROR)


class LinePort(Protocol):
    """Protocol for client-side port operations needed by the handshake."""

    def write(self, data: bytes, /) -> int | None: ...
    def read_until(self, expected: bytes = ..., size: int | None = ..., /) -> bytes: ...
    def close(self) -> None: ...


DEFAULT_HOST = "127.0.0.1"

# Default timing constants
DEFAULT_ACCEPT_TIMEOUT_S = float(os.environ.get("HANDSHAKE_ACCEPT_TIMEOUT_S", "5.0"))
DEFAULT_CLIENT_TIMEOUT_S = float(os.environ.get("HANDSHAKE_CLIENT_TIMEOUT_S", "2.0"))
ACCEPT_POLL_S = 0.1  # Accept slice, bounds close() latency before a client arrives

# First port handed out by the default port allocator
DEFAULT_PORT_BASE = int(os.environ.get("HANDSHAKE_PORT_BASE", "14220"))
MAX_PORT = 65535
