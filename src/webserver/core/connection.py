"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps an accepted client socket: reads one complete request head,
writes one response, closes.

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

There is no keep-alive: every connection carries exactly one request.

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                      ▲
              └──── peer closed / error ─────────────┘

=============================================================================
WHAT IS READ
=============================================================================

Only the request HEAD (request line + headers) is read:

    GET /index.html HTTP/1.1\\r\\n        ┐
    Host: localhost:8080\\r\\n            │  returned by read_request()
    \\r\\n                                ┘  (terminator stripped)
    <body bytes>                          ← never read, request bodies
                                            are not modeled

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"


class RequestTooLarge(ValueError):
    """The request head exceeded max_request_size before it was complete."""


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A single client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used as a log prefix.
        state: Current lifecycle state.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_size: int = 64 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[str]:
        """
        Read the request head from the socket.

        Reads until the blank line ending the headers, or until the peer
        stops sending. A client that closes its write side without a
        trailing blank line still gets its request parsed.

        Returns:
            The head as text (UTF-8, undecodable bytes replaced), without
            the terminating blank line. None if the peer sent nothing.

        Raises:
            TimeoutError: The client stalled longer than ``timeout``.
            RequestTooLarge: The head grew beyond ``max_request_size``.
        """
        self.state = ConnectionState.READING

        try:
            while HEADER_TERMINATOR not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    break  # Peer closed its side

                self._buffer += chunk
                if HEADER_TERMINATOR in self._buffer:
                    break

                # Still no terminator: all but a partial "\r\n\r" is head
                if len(self._buffer) > self.max_request_size + len(HEADER_TERMINATOR) - 1:
                    self._raise_too_large()
        except socket.timeout as e:
            raise TimeoutError("Request read timeout") from e

        if not self._buffer:
            return None

        head, _, _ = self._buffer.partition(HEADER_TERMINATOR)
        self._buffer = b""

        # Body bytes that arrived alongside the head do not count
        if len(head) > self.max_request_size:
            self._raise_too_large()

        return head.decode("utf-8", errors="replace")

    def _raise_too_large(self):
        raise RequestTooLarge(
            f"Request head too large: more than {self.max_request_size} bytes"
        )

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the complete response.

        Returns:
            True if sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        shutdown(SHUT_WR) sends FIN so the client sees the end of the
        response before the descriptor is released.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
