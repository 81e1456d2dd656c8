"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves files from a document root. This is the server's only handler:
it takes a parsed HTTPRequest and returns an HTTPResponse.

=============================================================================
FLOW
=============================================================================

    Request: GET /css/site.css?v=3 HTTP/1.1

    1. Method allowed?               no  → 405 + Allow: GET, POST, HEAD
    2. URL → path                    "/css/site.css"  (query dropped,
                                                       %-escapes decoded)
    3. Resolve inside root_dir?      no  → 404   (traversal attempt, logged)
    4. Directory?                    yes → serve its index_file
    5. Regular file?                 no  → 404
    6. Serve                         200 + Content-Type, Content-Length,
                                     Accept-Ranges: none, Server, Date
                                     (HEAD: same headers as GET, and
                                     every HEAD response has an empty body)

A request that escapes the root gets 404, not 403, so probing cannot
tell "forbidden" from "missing".

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

from .. import __version__
from ..http.constants import ALLOWED_METHODS
from ..http.headers import AcceptRanges, Date, Server
from ..http.mime_types import get_content_type
from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    format_http_date,
    method_not_allowed,
    not_found,
    ok,
)


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Handler serving files below ``root_dir``.

    Usage:
        handler = StaticFileHandler("./public")
        response = handler.handle(parse_request(text))
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        index_file: str = "index.html",
        server_name: str = f"webserver/{__version__}",
    ):
        """
        Args:
            root_dir: Directory to serve. Every served file must resolve
                      inside it.
            index_file: File served for directory URLs.
            server_name: Value of the Server header.

        Raises:
            ValueError: root_dir is not an existing directory.
        """
        # Resolved once so the containment check compares real paths
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file
        self.server_name = server_name

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        response = self._respond(request)

        if request.method == "HEAD":
            # Headers (including Content-Length) describe the GET response
            response.set_body(b"")

        return self._stamp(response)

    def _respond(self, request: HTTPRequest) -> HTTPResponse:
        if request.method not in ALLOWED_METHODS:
            logger.debug(f"Method not allowed: {request.method} {request.url}")
            return method_not_allowed()

        path = self.resolve(request.url)
        if path is None:
            return not_found()

        try:
            content = path.read_bytes()
        except OSError as e:
            logger.warning(f"Cannot read {path}: {e}")
            return not_found()

        response = ok(content, get_content_type(path))
        return response.add_header(AcceptRanges("none"))

    def resolve(self, url: str) -> Optional[Path]:
        """
        Map a request URL to a file below root_dir.

        Returns:
            Path of the file to serve, or None if there is none.
        """
        relative = unquote(urlsplit(url).path).lstrip("/")

        try:
            full_path = (self.root_dir / relative).resolve()
        except (OSError, ValueError):
            # Invalid characters such as NUL, or symlink loops
            return None

        if not full_path.is_relative_to(self.root_dir):
            logger.warning(f"Path traversal attempt: {url}")
            return None

        try:
            if full_path.is_dir():
                full_path = full_path / self.index_file
            if not full_path.is_file():
                return None
        except OSError as e:
            # ENAMETOOLONG and friends: nothing by that name can exist
            logger.debug(f"Cannot stat {url}: {e}")
            return None

        return full_path

    def _stamp(self, response: HTTPResponse) -> HTTPResponse:
        """Add the Server and Date headers every response carries."""
        return (response
            .add_header(Server(self.server_name))
            .add_header(Date(format_http_date())))
