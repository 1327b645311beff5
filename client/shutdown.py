"""Client shutdown functions for handshake-testkit."""

import logging

import serial

from common.protocol import LinePort

logger = logging.getLogger(__name__)


def client_close(port: LinePort) -> None:
    """Close the client port. Errors are logged, not raised."""
    try:
        port.close()
    except (serial.SerialException, OSError) as e:
        logger.warning(f"Client: error closing port: {e}")
        return
    logger.debug("Client: port closed")
