"""
=============================================================================
HTTP REQUEST MODEL & ASSEMBLER
=============================================================================

Turns the token stream from tokenizer.py into an immutable HTTPRequest.

=============================================================================
PARSING PIPELINE
=============================================================================

    raw text ──► scan_request() ──► [Token, ...] ──► RequestAssembler ──► HTTPRequest
                 (tokenizer.py)                       (this module)

The assembler is a small state machine over the token stream:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  position 0..2   METHOD, URL, VERSION (in this order, exactly once) │
    │                                                                     │
    │  then, repeated  HEADER_NAME ──► HEADER_VALUE                       │
    │                       │                                             │
    │                       └── anything else ──► DanglingHeaderName      │
    │                                                                     │
    │  finally         END_OF_TEXT ──► frozen HTTPRequest                 │
    └─────────────────────────────────────────────────────────────────────┘

Any other ordering (a first-line token later on, a value with no name,
a stream without END_OF_TEXT) means the tokenizer broke its contract,
and raises InternalConsistencyViolation rather than a client error.

=============================================================================
HEADER ALLOW-LIST
=============================================================================

Only ten request headers are recognised. Names match CASE-SENSITIVELY:

    Host                       → host
    User-Agent                 → user_agent
    Accept                     → accept
    Accept-Language            → accept_language
    Accept-Encoding            → accept_encoding
    Cookie                     → cookie
    Connection                 → connection
    Upgrade-Insecure-Requests  → upgrade_insecure_requests
    Referer                    → referer
    Cache-Control              → cache_control

A repeated header keeps its LAST value. Any other header is logged at
DEBUG level and dropped.

=============================================================================
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Optional, Union

from .errors import DanglingHeaderName, InternalConsistencyViolation
from .tokenizer import Token, TokenKind, scan_request


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    The first-line fields are always non-empty. Every header field is
    either "" (header absent) or the trimmed value of the header.
    Instances are immutable; assigning to a field raises
    ``dataclasses.FrozenInstanceError``.
    """

    # Request line
    method: str                         # GET, POST, HEAD, ...
    url: str                            # Request target as sent, e.g. "/foo?x=1"
    version: str                        # "1.1" (without "HTTP/")

    # Recognised headers
    host: str = ""
    user_agent: str = ""
    accept: str = ""
    upgrade_insecure_requests: str = ""
    accept_language: str = ""
    accept_encoding: str = ""
    cookie: str = ""
    connection: str = ""
    referer: str = ""
    cache_control: str = ""


# Header name → HTTPRequest field. Read-only, shared by every parse.
HEADER_FIELDS = MappingProxyType({
    "Host": "host",
    "User-Agent": "user_agent",
    "Accept": "accept",
    "Accept-Language": "accept_language",
    "Accept-Encoding": "accept_encoding",
    "Cookie": "cookie",
    "Connection": "connection",
    "Upgrade-Insecure-Requests": "upgrade_insecure_requests",
    "Referer": "referer",
    "Cache-Control": "cache_control",
})

_FIRST_LINE = (
    (TokenKind.METHOD, "method"),
    (TokenKind.URL, "url"),
    (TokenKind.VERSION, "version"),
)
_FIRST_LINE_KINDS = frozenset(kind for kind, _ in _FIRST_LINE)


class RequestAssembler:
    """
    Builds an HTTPRequest from tokens fed strictly in emission order.

    One assembler builds one request. Usage:

        assembler = RequestAssembler()
        request = assembler.assemble(scan_request(text))
    """

    def __init__(self):
        self._fields: dict[str, str] = {}
        self._position = 0
        self._pending_name: Optional[str] = None
        self._request: Optional[HTTPRequest] = None

    @property
    def is_complete(self) -> bool:
        """True once END_OF_TEXT has been consumed."""
        return self._request is not None

    def feed(self, token: Token) -> Optional[HTTPRequest]:
        """
        Consume one token.

        Returns:
            The finished request when ``token`` is END_OF_TEXT, else None.

        Raises:
            DanglingHeaderName: A header name is not followed by its value.
            InternalConsistencyViolation: Tokens arrive out of contract.
        """
        if self._request is not None:
            raise InternalConsistencyViolation(
                f"Token {token!r} received after END_OF_TEXT"
            )

        position = self._position
        self._position += 1

        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE: first three tokens
        # ─────────────────────────────────────────────────────────────────
        if position < len(_FIRST_LINE):
            expected, field_name = _FIRST_LINE[position]
            if token.kind is not expected:
                raise InternalConsistencyViolation(
                    f"Expected {expected.name} at position {position}, got {token!r}"
                )
            self._fields[field_name] = token.text
            return None

        # ─────────────────────────────────────────────────────────────────
        # HEADER VALUE: must directly follow its name
        # ─────────────────────────────────────────────────────────────────
        if self._pending_name is not None:
            name, self._pending_name = self._pending_name, None
            if token.kind is not TokenKind.HEADER_VALUE:
                raise DanglingHeaderName(name)
            self._assign_header(name, token.text)
            return None

        if token.kind in _FIRST_LINE_KINDS:
            raise InternalConsistencyViolation(
                f"Request line token {token!r} after the request line"
            )

        if token.kind is TokenKind.HEADER_NAME:
            self._pending_name = token.text
            return None

        if token.kind is TokenKind.HEADER_VALUE:
            raise InternalConsistencyViolation(
                f"Header value {token.text!r} without a header name"
            )

        # END_OF_TEXT
        self._request = HTTPRequest(**self._fields)
        return self._request

    def finish(self) -> HTTPRequest:
        """
        Return the finished request once the token stream is exhausted.

        Raises:
            DanglingHeaderName: The stream ended right after a header name.
            InternalConsistencyViolation: The stream ended without END_OF_TEXT.
        """
        if self._pending_name is not None:
            raise DanglingHeaderName(self._pending_name)
        if self._request is None:
            raise InternalConsistencyViolation("Token stream ended without END_OF_TEXT")
        return self._request

    def assemble(self, tokens: Iterable[Token]) -> HTTPRequest:
        """Feed every token and return the finished request."""
        for token in tokens:
            self.feed(token)
        return self.finish()

    def _assign_header(self, name: str, value: str) -> None:
        field_name = HEADER_FIELDS.get(name)
        if field_name is None:
            logger.debug(f"Unexpected header name '{name}'")
            return
        # Later occurrences overwrite earlier ones
        self._fields[field_name] = value


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(data: Union[str, bytes]) -> HTTPRequest:
    """
    Parse a complete request into an HTTPRequest.

    Args:
        data: Request text with CRLF line endings. Bytes are decoded as
              UTF-8, undecodable bytes becoming U+FFFD.

    Returns:
        The parsed request.

    Raises:
        HTTPParseError: The request is malformed (see errors.py).
        InternalConsistencyViolation: Tokenizer/assembler defect.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    return RequestAssembler().assemble(scan_request(data))
