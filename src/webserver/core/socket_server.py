"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and turns every accepted client into a
Connection handed to a callback. Knows nothing about HTTP.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer.start()                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   bind()             new socket, bind, listen                       │
    │   stop signals       SIGINT/SIGTERM → shutdown() (main thread only) │
    │                                                                     │
    │   while serving:                                                    │
    │       accept()  ──► Connection(...) ──► on_connection(conn)         │
    │       (1 s poll timeout, so shutdown() is noticed promptly)         │
    │                                                                     │
    │   finally            previous signal handlers back, socket closed   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SocketServer:
    """
    Listening socket plus accept loop.

        server = SocketServer(config)
        server.bind()                     # optional, start() binds if needed
        server.start(on_connection)       # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._listener: Optional[socket.socket] = None
        self._serving = threading.Event()
        self._saved_handlers: dict[int, object] = {}

    @property
    def address(self) -> tuple[str, int]:
        """
        Address the server listens on.

        Once bound this is read from the socket, so a configured port of 0
        reports the port the OS actually assigned.
        """
        if self._listener is None:
            return (self.config.host, self.config.port)
        host, port = self._listener.getsockname()[:2]
        return (host, port)

    def bind(self) -> tuple[str, int]:
        """
        Bind and start listening, without accepting yet.

        Raises:
            OSError: Address in use, permission denied, unknown host, ...
        """
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        # Responses are written in one sendall(); don't hold back the tail
        listener.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        listener.settimeout(ACCEPT_POLL_INTERVAL)

        address = (self.config.host, self.config.port)
        try:
            listener.bind(address)
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {address[0]}:{address[1]}: {e}")
            listener.close()
            raise

        self._listener = listener
        return self.address

    def start(self, on_connection: Callable[[Connection], None]):
        """Accept connections until shutdown() is called. Blocks."""
        if self._listener is None:
            self.bind()

        self._serving.set()
        self._install_stop_signals()

        host, port = self.address
        logger.info(f"Listening on {host}:{port}")

        try:
            while self._serving.is_set():
                conn = self._accept()
                if conn is not None:
                    on_connection(conn)
        finally:
            self._close()

    def shutdown(self):
        """Ask the accept loop to stop. Idempotent and thread-safe."""
        if self._serving.is_set():
            logger.info("Stopping accept loop...")
        self._serving.clear()

    def _accept(self) -> Optional[Connection]:
        try:
            client, address = self._listener.accept()
        except socket.timeout:
            return None
        except OSError as e:
            if self._serving.is_set():
                logger.error(f"accept() failed: {e}")
            self._serving.clear()
            return None

        logger.debug(f"Connection from {address[0]}:{address[1]}")
        return Connection(
            socket=client,
            address=address,
            buffer_size=self.config.buffer_size,
            timeout=self.config.timeout,
            max_request_size=self.config.max_request_size,
        )

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _install_stop_signals(self):
        # signal.signal() raises ValueError outside the main thread
        if threading.current_thread() is not threading.main_thread():
            return

        def on_signal(signum, frame):
            logger.info(f"{signal.Signals(signum).name} received, shutting down")
            self.shutdown()

        for signum in STOP_SIGNALS:
            self._saved_handlers[signum] = signal.signal(signum, on_signal)

    def _restore_signals(self):
        while self._saved_handlers:
            signum, handler = self._saved_handlers.popitem()
            signal.signal(signum, handler)

    def _close(self):
        self._restore_signals()

        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
            self._listener = None

        logger.info("Listening socket closed")
