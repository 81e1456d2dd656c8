"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes this server can send.

=============================================================================
WHY A CLOSED SET?
=============================================================================

A response is rendered from an HTTPStatus member, never from a string
handed in by the caller:

    HTTPResponse(status=HTTPStatus.NOT_FOUND)     ✓ renders "404 NOT FOUND"
    HTTPResponse(status="404 Whatever\\r\\nX: y")   ✗ cannot happen

So only status lines we explicitly support can ever reach the wire.
Supporting a new status means adding a member AND its reason phrase below.

    ┌────────┬─────────────────────────────────────────────────────────┐
    │  Code  │  Status line text                                       │
    ├────────┼─────────────────────────────────────────────────────────┤
    │  200   │  200 OK                                                 │
    │  400   │  400 BAD REQUEST                                        │
    │  404   │  404 NOT FOUND                                          │
    │  405   │  405 METHOD NOT ALLOWED                                 │
    │  500   │  500 INTERNAL SERVER ERROR                              │
    └────────┴─────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Supported HTTP status codes.

    Members compare equal to their numeric code, and ``str()`` gives the
    exact text used in the status line:

        >>> HTTPStatus.OK == 200
        True
        >>> str(HTTPStatus.METHOD_NOT_ALLOWED)
        '405 METHOD NOT ALLOWED'
    """

    # 2xx SUCCESS
    OK = 200                        # Standard response for successful requests

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400               # Request could not be parsed
    NOT_FOUND = 404                 # Requested resource could not be found
    METHOD_NOT_ALLOWED = 405        # Method not supported for the resource

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500     # Defect while handling a valid request

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    def __str__(self) -> str:
        return f"{self.value} {self.phrase}"

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


# =============================================================================
# REASON PHRASES
# =============================================================================
#
# HTTP/1.1 404 NOT FOUND
#          ─── ─────────
#           │      │
#           │      └── Reason phrase (from this dict)
#           └───────── Status code
#
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "BAD REQUEST",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
    HTTPStatus.METHOD_NOT_ALLOWED: "METHOD NOT ALLOWED",
    HTTPStatus.INTERNAL_SERVER_ERROR: "INTERNAL SERVER ERROR",
}
