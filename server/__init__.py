"""Server package for handshake-testkit.

Contains the fake server and its handshake stages:
- handshake: server_listen, server_accept, server_send_info,
  server_wait_for_connect, server_wait_for_ping, server_send_pong
- shutdown: server_release
- fake: HandshakeFakeServer, Customizer
"""

from server.fake import Customizer, HandshakeFakeServer
from server.handshake import (
    server_accept,
    server_listen,
    server_send_info,
    server_send_pong,
    server_wait_for_connect,
    server_wait_for_ping,
)
from server.shutdown import server_release

__all__ = [
    "Customizer",
    "HandshakeFakeServer",
    "server_listen",
    "server_accept",
    "server_send_info",
    "server_wait_for_connect",
    "server_wait_for_ping",
    "server_send_pong",
    "server_release",
]
