"""
=============================================================================
HTTP RESPONSE MODEL & RENDERER
=============================================================================

Builds HTTP/1.1 responses and serializes them into exact wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  STATUS LINE        HTTP/1.1 405 METHOD NOT ALLOWED\\r\\n             │
    │                     ──┬───── ────────┬───────────                   │
    │                    version        status                            │
    │                                                                     │
    │  HEADERS            Allow: GET, POST, HEAD\\r\\n                      │
    │  (insertion order,  Content-Length: 20\\r\\n                          │
    │   duplicates kept)                                                  │
    │                                                                     │
    │  EMPTY LINE         \\r\\n                                            │
    │                                                                     │
    │  BODY               This is not allowed!      (bytes, verbatim)     │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT THE RENDERER DOES NOT DO
=============================================================================

render_response() emits exactly what the response holds, nothing more:

- No automatic Content-Length. Add ContentLength(len(body)) yourself,
  or use one of the convenience functions at the bottom of this module.
- No automatic Date or Server header.
- No mutation: rendering the same response twice yields identical bytes.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from .constants import ALLOWED_METHODS_HEADER, HTTP_VERSION
from .headers import Allow, ContentLength, ContentType, ResponseHeader
from .status_codes import HTTPStatus


CRLF = "\r\n"

TEXT_PLAIN = "text/plain; charset=utf-8"


@dataclass
class HTTPResponse:
    """
    An HTTP response under construction.

    Status and headers come from the closed vocabularies in
    status_codes.py and headers.py; nothing else is accepted.

        response = HTTPResponse(HTTPStatus.OK, body=b"Hello, World!")
        response.add_header(ContentLength(13))
        sock.sendall(response.render())
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: list[ResponseHeader] = field(default_factory=list)
    body: bytes = b""
    version: str = HTTP_VERSION

    def __post_init__(self):
        _check_status(self.status)
        _check_version(self.version)

        headers = list(self.headers)
        for header in headers:
            _check_header(header)
        self.headers = headers

        self.body = _to_body(self.body)

    @property
    def status_line(self) -> str:
        """
        Status line without the trailing CRLF.

        Example: "HTTP/1.1 200 OK"
        """
        return f"HTTP/{self.version} {self.status}"

    def add_header(self, header: ResponseHeader) -> "HTTPResponse":
        """
        Append a header. Returns self for chaining:

            response.add_header(Server("x")).add_header(ContentLength(0))
        """
        _check_header(header)
        self.headers.append(header)
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Replace the body. Strings are encoded as UTF-8."""
        self.body = _to_body(body)
        return self

    def render(self) -> bytes:
        """Serialize to wire bytes. See render_response()."""
        return render_response(self)


def _check_header(header: object) -> None:
    if not isinstance(header, ResponseHeader):
        raise TypeError(f"Expected a ResponseHeader, got {header!r}")


def _check_status(status: object) -> None:
    if not isinstance(status, HTTPStatus):
        raise TypeError(f"status must be an HTTPStatus, got {status!r}")


def _check_version(version: object) -> None:
    if not isinstance(version, str) or not version or any(c.isspace() for c in version):
        raise ValueError(f"Invalid HTTP version: {version!r}")


def _to_body(body: object) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    raise TypeError(f"body must be str or bytes, got {type(body).__name__}")


def render_response(response: HTTPResponse) -> bytes:
    """
    Serialize a response into the bytes sent over the socket.

    ==========================================================================
    SERIALIZATION FORMAT
    ==========================================================================

        HTTP/{version} {code} {reason}\\r\\n      ← status line
        {Name}: {value}\\r\\n                      ← one per header, in order
        \\r\\n                                     ← end of headers
        {body}                                  ← raw bytes

    ==========================================================================
    """
    # Fields may have been reassigned after construction
    _check_status(response.status)
    _check_version(response.version)
    for header in response.headers:
        _check_header(header)
    body = _to_body(response.body)

    lines = [response.status_line]
    lines.extend(str(header) for header in response.headers)

    head = "".join(line + CRLF for line in lines) + CRLF
    return head.encode("utf-8") + body


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: Optional[datetime] = None) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231), for the Date header.

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 14 Feb 2018 11:27:44 GMT

    Args:
        dt: Datetime to format. Defaults to now. Aware datetimes are
            converted to UTC; naive ones are assumed to be UTC already.
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Spelled out rather than strftime("%a"/"%b"), which follow the locale
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the server sends most. Unlike a bare
# HTTPResponse, these always carry Content-Type and Content-Length.
#
#     return ok("<h1>Hi</h1>", content_type="text/html; charset=utf-8")
#     return not_found()
#     return method_not_allowed()
#
# =============================================================================

def _text_response(status: HTTPStatus, body: Union[str, bytes],
                   content_type: Optional[str]) -> HTTPResponse:
    response = HTTPResponse(status=status, body=body)
    if content_type:
        response.add_header(ContentType(content_type))
    response.add_header(ContentLength(len(response.body)))
    return response


def ok(body: Union[str, bytes] = b"", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    A str body defaults to text/plain; for bytes, Content-Type is only
    sent when given.
    """
    if content_type is None and isinstance(body, str):
        content_type = TEXT_PLAIN
    return _text_response(HTTPStatus.OK, body, content_type)


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """Create a 400 response for a request that could not be parsed."""
    return _text_response(HTTPStatus.BAD_REQUEST, message, TEXT_PLAIN)


def not_found(message: str = "Not Found") -> HTTPResponse:
    """Create a 404 response."""
    return _text_response(HTTPStatus.NOT_FOUND, message, TEXT_PLAIN)


def method_not_allowed(
    allowed: str = ALLOWED_METHODS_HEADER,
    message: str = "This is not allowed!",
) -> HTTPResponse:
    """
    Create a 405 response.

    Includes the Allow header listing valid methods (RFC 7231 requirement).
    """
    response = HTTPResponse(status=HTTPStatus.METHOD_NOT_ALLOWED, body=message)
    response.add_header(Allow(allowed))
    response.add_header(ContentType(TEXT_PLAIN))
    response.add_header(ContentLength(len(response.body)))
    return response


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """
    Create a 500 response.

    Keep the message generic; details belong in the log.
    """
    return _text_response(HTTPStatus.INTERNAL_SERVER_ERROR, message, TEXT_PLAIN)
