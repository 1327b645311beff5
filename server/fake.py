"""Fake handshake server for handshake-testkit.

HandshakeFakeServer accepts exactly one client on a background thread and
walks it through INFO -> CONNECT -> PING -> PONG. It can be told to stop
at a given stage (ExitAt) so client connection logic can be tested against
servers that vanish mid-handshake. After a full handshake it optionally
runs a customizer, then waits until the owning test calls close().

Typical use:

    with HandshakeFakeServer(ExitAt.AFTER_INFO) as server:
        port = open_socket_port(server.port)
        with pytest.raises(HandshakeError):
            client_handshake(port)
        server.join(timeout_s=5)
        assert server.progress == Progress.SENT_INFO
        assert not server.was_protocol_failure()
"""

import logging
import socket
import threading
from typing import Protocol, TextIO

from common.connection import Connection, UnexpectedMessageError
from common.encoding import EncodingError, TransportError
from common.ports import PortAllocator, default_port_allocator
from common.protocol import (
    DEFAULT_ACCEPT_TIMEOUT_S,
    DEFAULT_HOST,
    ExitAt,
    Outcome,
    Progress,
)
from common.report import HandshakeReport
from server.handshake import (
    server_accept,
    server_listen,
    server_send_info,
    server_send_pong,
    server_wait_for_connect,
    server_wait_for_ping,
)
from server.shutdown import server_release

logger = logging.getLogger(__name__)


class Customizer(Protocol):
    """Extra protocol steps run after PONG, on the still-open connection."""

    def __call__(
        self, server: "HandshakeFakeServer", reader: TextIO, writer: TextIO
    ) -> None: ...


class HandshakeFakeServer:
    """Single-client fake server with injectable exit points.

    The background thread is the only writer of progress and outcome;
    other threads only read them.
    """

    # (exit checked before the step, step, progress reached after the step)
    _STAGES = (
        (ExitAt.BEFORE_INFO, server_send_info, Progress.SENT_INFO),
        (ExitAt.AFTER_INFO, server_wait_for_connect, Progress.GOT_CONNECT),
        (ExitAt.AFTER_CONNECT, server_wait_for_ping, Progress.GOT_PING),
        (ExitAt.AFTER_PING, server_send_pong, Progress.SENT_PONG),
    )

    def __init__(
        self,
        exit_at: ExitAt = ExitAt.NO_EXIT,
        port: int | None = None,
        customizer: Customizer | None = None,
        *,
        host: str = DEFAULT_HOST,
        port_allocator: PortAllocator | None = None,
        accept_timeout_s: float = DEFAULT_ACCEPT_TIMEOUT_S,
    ) -> None:
        if port is None:
            port = (port_allocator or default_port_allocator).next_port()

        self._port = port
        self._host = host
        self._exit_at = exit_at
        self._customizer = customizer
        self._accept_timeout_s = accept_timeout_s
        self._tag = f"Fake server @{port}"

        self._progress = Progress.NO_CLIENT
        self._outcome = Outcome.RUNNING
        self._error: Exception | None = None

        self._shutdown = threading.Event()
        self._listening = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"fake-server-{port}", daemon=True
        )
        self._thread.start()

        # Only wait for the bind so clients can dial in as soon as we return
        self._listening.wait()

    def __enter__(self) -> "HandshakeFakeServer":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"HandshakeFakeServer(port={self._port}, exit_at={self._exit_at.name}, "
            f"progress={self._progress.name}, outcome={self._outcome.name})"
        )

    @property
    def port(self) -> int:
        return self._port

    @property
    def progress(self) -> Progress:
        return self._progress

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def error(self) -> Exception | None:
        """Exception that ended the run, if it ended on an error."""
        return self._error

    @property
    def protocol_failure(self) -> bool:
        return self._outcome.is_protocol_failure

    def get_port(self) -> int:
        return self._port

    def get_progress(self) -> Progress:
        return self._progress

    def was_protocol_failure(self) -> bool:
        """True if the run ended on a client violation or I/O error, not an intentional stop."""
        return self._outcome.is_protocol_failure

    def close(self) -> None:
        """Signal the background thread to stop waiting and release its sockets.

        Safe to call at any point and more than once. Does not block.
        """
        self._shutdown.set()
        logger.debug(f"{self._tag}: shutdown signalled")

    def join(self, timeout_s: float | None = None) -> bool:
        """Wait for the background thread to finish. Returns True if it has."""
        self._thread.join(timeout_s)
        return not self._thread.is_alive()

    def report(self) -> HandshakeReport:
        return HandshakeReport(
            port=self._port,
            progress=self._progress,
            outcome=self._outcome,
            error=self._error,
        )

    def _advance(self, progress: Progress) -> None:
        if progress > self._progress:
            self._progress = progress
        logger.info(f"{self._tag}: {progress.name}")

    def _handshake(self, conn: Connection) -> Outcome:
        self._advance(Progress.CLIENT_CONNECTED)

        for exit_at, step, reached in self._STAGES:
            if self._exit_at == exit_at:
                logger.info(f"{self._tag}: exiting at {exit_at.name}")
                return Outcome.EXITED
            step(conn)
            self._advance(reached)

        if self._customizer is not None:
            self._advance(Progress.STARTED_CUSTOM_CODE)
            self._customizer(self, conn.reader, conn.writer)
            self._advance(Progress.COMPLETED_CUSTOM_CODE)

        # Wait for the test to release us
        self._shutdown.wait()
        return Outcome.COMPLETED

    def _run(self) -> None:
        listener: socket.socket | None = None
        conn: Connection | None = None

        try:
            try:
                listener = server_listen(self._host, self._port)
            finally:
                self._listening.set()
            logger.info(f"{self._tag}: started")

            conn = server_accept(listener, self._shutdown, self._accept_timeout_s)
            if conn is None:
                logger.info(f"{self._tag}: closed before any client connected")
                self._outcome = Outcome.CANCELLED
            else:
                logger.info(f"{self._tag}: got client {conn.peer}")
                self._outcome = self._handshake(conn)

        except (UnexpectedMessageError, EncodingError) as e:
            logger.warning(f"{self._tag}: protocol violation: {e}")
            self._error = e
            self._outcome = Outcome.PROTOCOL_VIOLATION
        except (TransportError, OSError) as e:
            logger.warning(f"{self._tag}: I/O failure: {e}")
            self._error = e
            self._outcome = Outcome.IO_ERROR
        except Exception as e:
            logger.warning(f"{self._tag}: unexpected error: {e}", exc_info=True)
            self._error = e
            self._outcome = Outcome.ERROR
        finally:
            server_release(listener, conn, self._tag)

        logger.info(f"{self._tag}: completed ({self._outcome.name})")
