"""Server resource release for handshake-testkit."""

import logging
import socket

from common.connection import Connection

logger = logging.getLogger(__name__)


def _close_quietly(resource: object, what: str, tag: str) -> None:
    try:
        resource.close()  # type: ignore[attr-defined]
    except (OSError, ValueError) as e:
        logger.warning(f"{tag}: error closing {what}: {e}")


def server_release(
    listener: socket.socket | None,
    conn: Connection | None,
    tag: str = "Server",
) -> None:
    """Close the listener and client connection.

    Close errors are logged, never raised, so they cannot mask the reason
    the handshake ended.
    """
    if listener is not None:
        _close_quietly(listener, "listener", tag)

    if conn is not None:
        _close_quietly(conn.writer, "writer", tag)
        _close_quietly(conn.reader, "reader", tag)
        _close_quietly(conn.sock, "socket", tag)

    logger.debug(f"{tag}: resources released")
