"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    SocketServer ──► Connection ──► parse_request() ──► handler ──► render

=============================================================================
REQUEST PROCESSING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  accept thread          worker thread (one per connection)          │
    │  ──────────────         ─────────────────────────────────────────   │
    │  accept()                                                           │
    │    └─► submit ────────► read_request()                              │
    │                           └─► handle_request_text(text)             │
    │                                 ├─ parse_request()                  │
    │                                 ├─ handler(request)                 │
    │                                 └─ render_response()                │
    │                         send_response(bytes)                        │
    │                         close()                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR MAPPING
=============================================================================

    HTTPParseError                  → 400 BAD REQUEST        (logged INFO)
    RequestTooLarge                 → 400 BAD REQUEST        (logged INFO)
    InternalConsistencyViolation    → 500 INTERNAL SERVER ERROR (traceback)
    any exception from the handler  → 500 INTERNAL SERVER ERROR (traceback)

No input can bring the process down; the worst outcome for a single
request is a 500 and a logged traceback.

=============================================================================
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from .config import ServerConfig
from .core import Connection, ConnectionState, RequestTooLarge, SocketServer
from .handlers import StaticFileHandler
from .http.errors import HTTPParseError, InternalConsistencyViolation
from .http.request import HTTPRequest, parse_request
from .http.response import HTTPResponse, bad_request, internal_error


logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


class HTTPServer:
    """
    Threaded HTTP/1.1 server. One request per connection.

    Usage:
        config = ServerConfig(port=8080, root_dir="./public")
        server = HTTPServer(config)
        server.run()  # Blocks until Ctrl+C / SIGTERM
    """

    def __init__(self, config: Optional[ServerConfig] = None, handler: Optional[Handler] = None):
        """
        Args:
            config: Server configuration. Validated immediately.
            handler: Callable turning a request into a response. Defaults to
                     a StaticFileHandler serving ``config.root_dir``.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        if handler is None:
            handler = StaticFileHandler(
                self.config.root_dir,
                index_file=self.config.index_file,
                server_name=self.config.server_name,
            )
        self.handler = handler

        self._socket_server = SocketServer(self.config)
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def address(self) -> tuple[str, int]:
        return self._socket_server.address

    def bind(self) -> tuple[str, int]:
        """
        Bind the listening socket without serving yet.

        Raises:
            OSError: The address could not be bound.
        """
        return self._socket_server.bind()

    def run(self):
        """Serve until shutdown() is called or a stop signal arrives. Blocks."""
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="webserver-worker",
        )
        logger.info(f"Serving {self.config.root_dir} with {self.config.max_workers} workers")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Waiting for in-flight requests...")
            self._executor.shutdown(wait=True)
            self._executor = None
            logger.info("Server stopped")

    def shutdown(self):
        self._socket_server.shutdown()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called from the accept loop: hand the connection to a worker."""
        future = self._executor.submit(self._process_connection, conn)
        future.add_done_callback(self._log_worker_failure)

    @staticmethod
    def _log_worker_failure(future: Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Worker failed", exc_info=error)

    def _process_connection(self, conn: Connection):
        """Read one request, answer it, close. Runs in a worker thread."""
        with conn:
            try:
                text = conn.read_request()
            except RequestTooLarge as e:
                logger.info(f"[{conn.id}] {conn.client_ip}: {e}")
                conn.send_response(bad_request(str(e)).render())
                return
            except TimeoutError:
                logger.debug(f"[{conn.id}] Read timeout, closing")
                return
            except Exception:
                logger.exception(f"[{conn.id}] Connection error")
                return

            if text is None:
                return  # Client connected and left without sending anything

            conn.state = ConnectionState.PROCESSING
            conn.send_response(self.handle_request_text(text, conn.client_ip))

    def handle_request_text(self, text: str, client: str = "-") -> bytes:
        """
        Turn one complete request into response bytes.

        Never raises: every failure becomes a 400 or 500 response.

        Args:
            text: The request head as handed over by the connection.
            client: Client identifier used in log lines.
        """
        try:
            request = parse_request(text)
        except HTTPParseError as e:
            logger.info(f"{client} bad request: {e}")
            return bad_request(str(e)).render()
        except InternalConsistencyViolation:
            logger.exception(f"{client} request parser defect")
            return internal_error().render()

        try:
            response = self.handler(request)
            if not isinstance(response, HTTPResponse):
                raise TypeError(f"Handler returned {type(response).__name__}, not HTTPResponse")
            data = response.render()
        except Exception:
            logger.exception(f"{client} handler error for {request.method} {request.url}")
            response = internal_error()
            data = response.render()

        logger.info(f'{client} "{request.method} {request.url} HTTP/{request.version}" {response.status.value}')
        return data
