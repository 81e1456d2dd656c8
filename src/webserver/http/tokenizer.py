"""
=============================================================================
HTTP REQUEST TOKENIZER
=============================================================================

Splits raw request text into a flat sequence of structural tokens.
The assembler in request.py consumes them; tokens never leave the
parsing boundary.

=============================================================================
FROM TEXT TO TOKENS
=============================================================================

    "GET /foo HTTP/1.1\\r\\nHost: localhost:8080\\r\\nAccept: */*\\r\\n\\r\\n"

        │ split_lines(): strip, split on CRLF
        ▼

    ["GET /foo HTTP/1.1", "Host: localhost:8080", "Accept: */*"]

        │ parse_first_line() / parse_header_line()
        ▼

    Method("GET")  Url("/foo")  Version("1.1")
    HeaderName("Host")    HeaderValue("localhost:8080")
    HeaderName("Accept")  HeaderValue("*/*")
    EndOfText

=============================================================================
RULES
=============================================================================

1. REQUEST LINE: exactly three fields separated by single spaces.
   "GET  /foo HTTP/1.1" (two spaces) produces an empty field and is
   rejected, as is anything with more or fewer than three fields.

2. VERSION: must start with the literal "HTTP/", which is stripped.

3. HEADER LINES: split at the FIRST colon, so values may contain colons
   ("Host: localhost:8080"). Name and value are trimmed. Blank lines
   are skipped.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum

from .errors import (
    EmptyRequest,
    MalformedHeaderLine,
    MalformedRequestLine,
    MalformedVersion,
)


VERSION_PREFIX = "HTTP/"


class TokenKind(Enum):
    """Structural role of a token."""
    METHOD = "method"
    URL = "url"
    VERSION = "version"
    HEADER_NAME = "header_name"
    HEADER_VALUE = "header_value"
    END_OF_TEXT = "end_of_text"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str = ""

    def __repr__(self) -> str:
        if self.kind is TokenKind.END_OF_TEXT:
            return "Token(END_OF_TEXT)"
        return f"Token({self.kind.name}, {self.text!r})"


END_OF_TEXT = Token(TokenKind.END_OF_TEXT)


def split_lines(text: str) -> list[str]:
    """Strip the whole request and split it into CRLF-delimited lines."""
    return text.strip().split("\r\n")


def parse_first_line(line: str) -> tuple[Token, Token, Token]:
    """
    Tokenize the request line: ``METHOD SP URL SP HTTP/VERSION``.

    Raises:
        MalformedRequestLine: Not exactly three non-empty fields.
        MalformedVersion: Version lacks the ``HTTP/`` prefix or is empty.
    """
    parts = line.split(" ")
    if len(parts) != 3:
        raise MalformedRequestLine(line)

    method, url, full_version = (part.strip() for part in parts)
    if not method or not url or not full_version:
        raise MalformedRequestLine(line)

    if not full_version.startswith(VERSION_PREFIX):
        raise MalformedVersion(full_version)

    version = full_version[len(VERSION_PREFIX):]
    if not version:
        raise MalformedVersion(full_version)

    return (
        Token(TokenKind.METHOD, method),
        Token(TokenKind.URL, url),
        Token(TokenKind.VERSION, version),
    )


def parse_header_line(line: str) -> tuple[Token, Token]:
    """
    Tokenize a ``Name: Value`` header line.

    Raises:
        MalformedHeaderLine: The line contains no colon.
    """
    name, colon, value = line.partition(":")
    if not colon:
        raise MalformedHeaderLine(line)

    return (
        Token(TokenKind.HEADER_NAME, name.strip()),
        Token(TokenKind.HEADER_VALUE, value.strip()),
    )


def scan_request(text: str) -> list[Token]:
    """
    Tokenize a complete request.

    Returns:
        Method, Url, Version, then a HeaderName/HeaderValue pair per
        header line in source order, then a single END_OF_TEXT.

    Raises:
        EmptyRequest: The text is empty after trimming.
        HTTPParseError: Any malformed line (see the helpers above).
    """
    if not text.strip():
        raise EmptyRequest()

    first_line, *header_lines = split_lines(text)

    tokens: list[Token] = list(parse_first_line(first_line))
    for line in header_lines:
        if not line.strip():
            continue
        tokens.extend(parse_header_line(line))

    tokens.append(END_OF_TEXT)
    return tokens
