"""Client package for handshake-testkit.

Reference client used to drive the fake server in tests:
- handshake: client_read_info, client_send_connect, client_send_ping,
  client_wait_pong, client_handshake
- shutdown: client_close
"""

from client.handshake import (
    client_handshake,
    client_read_info,
    client_send_connect,
    client_send_ping,
    client_wait_pong,
)
from client.shutdown import client_close

__all__ = [
    "client_read_info",
    "client_send_connect",
    "client_send_ping",
    "client_wait_pong",
    "client_handshake",
    "client_close",
]
