"""
=============================================================================
HTTP MESSAGE LAYER
=============================================================================

Parsing of requests and rendering of responses. Pure, synchronous and
free of I/O: every function here works on in-memory values only and may
be called from any number of threads at once.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  request text ──► tokenizer ──► assembler ──► HTTPRequest           │
    │                                                                     │
    │  HTTPResponse ──► render_response() ──► bytes                       │
    └─────────────────────────────────────────────────────────────────────┘

Example:

    from webserver.http import parse_request, HTTPResponse, HTTPStatus
    from webserver.http.headers import ContentLength

    request = parse_request("GET /foo HTTP/1.1\\r\\nHost: localhost\\r\\n\\r\\n")

    response = HTTPResponse(status=HTTPStatus.OK, body=b"Hello, World!")
    response.add_header(ContentLength(len(response.body)))
    wire_bytes = response.render()

=============================================================================
"""

from .constants import ALLOWED_METHODS, ALLOWED_METHODS_HEADER, HTTP_VERSION
from .errors import (
    DanglingHeaderName,
    EmptyRequest,
    HTTPParseError,
    InternalConsistencyViolation,
    MalformedHeaderLine,
    MalformedRequestLine,
    MalformedVersion,
)
from .headers import (
    AcceptRanges,
    Allow,
    ContentLength,
    ContentType,
    Date,
    ResponseHeader,
    Server,
)
from .request import HEADER_FIELDS, HTTPRequest, RequestAssembler, parse_request
from .response import (
    HTTPResponse,
    bad_request,
    format_http_date,
    internal_error,
    method_not_allowed,
    not_found,
    ok,
    render_response,
)
from .status_codes import HTTPStatus
from .mime_types import get_content_type, get_mime_type

__all__ = [
    # Constants
    "HTTP_VERSION",
    "ALLOWED_METHODS",
    "ALLOWED_METHODS_HEADER",

    # Errors
    "HTTPParseError",
    "EmptyRequest",
    "MalformedRequestLine",
    "MalformedVersion",
    "MalformedHeaderLine",
    "DanglingHeaderName",
    "InternalConsistencyViolation",

    # Request parsing
    "HTTPRequest",
    "HEADER_FIELDS",
    "RequestAssembler",
    "parse_request",

    # Response building
    "HTTPResponse",
    "render_response",
    "format_http_date",
    "ok",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Vocabularies
    "HTTPStatus",
    "ResponseHeader",
    "Allow",
    "Server",
    "AcceptRanges",
    "ContentType",
    "ContentLength",
    "Date",

    # MIME types
    "get_mime_type",
    "get_content_type",
]
