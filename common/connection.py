"""Connection state and handshake errors for handshake-testkit.

Contains:
- HandshakeError: Exception for handshake failures
- UnexpectedMessageError: Client line did not carry the expected keyword
- ServerInfo: Greeting payload as seen by the client
- Connection: Accepted client connection owned by the fake server
"""

import socket
from dataclasses import dataclass, field
from typing import TextIO


class HandshakeError(Exception):
    """Raised when the handshake fails."""

    pass


class UnexpectedMessageError(HandshakeError):
    """Raised when a received line does not start with the expected keyword."""

    pass


@dataclass
class ServerInfo:
    """Greeting payload received by the client."""

    server_id: str | None
    raw: dict = field(default_factory=dict)


@dataclass
class Connection:
    """Accepted client connection.

    reader/writer are text streams over sock (UTF-8, newline="") so CRLF
    passes through untranslated.
    """

    sock: socket.socket
    reader: TextIO
    writer: TextIO
    peer: tuple[str, int] | None = None
