"""
=============================================================================
HTTP PARSING ERRORS
=============================================================================

Every way a raw request can be rejected has its own exception class, so
the connection handler can decide the client-visible outcome instead of
the process dying on untrusted input.

=============================================================================
ERROR TAXONOMY
=============================================================================

    ValueError
     └── HTTPParseError (status_code=400)      ← malformed CLIENT input
          ├── EmptyRequest                      ""
          ├── MalformedRequestLine              "GET /foo"
          ├── MalformedVersion                  "GET /foo FTP/1.1"
          ├── MalformedHeaderLine               "Host localhost"
          └── DanglingHeaderName                name token without value

    RuntimeError
     └── InternalConsistencyViolation           ← a DEFECT in this package

InternalConsistencyViolation does NOT inherit from
HTTPParseError: a handler written as

    except HTTPParseError:
        return bad_request()

must never hide a tokenizer/assembler bug behind a 400 response.

=============================================================================
"""


class HTTPParseError(ValueError):
    """
    Base class for all malformed-request errors.

    Attributes:
        status_code: HTTP status the connection handler should answer with.
    """

    status_code = 400


class EmptyRequest(HTTPParseError):
    """The request text was empty (or only whitespace)."""

    def __init__(self):
        super().__init__("Empty request")


class MalformedRequestLine(HTTPParseError):
    """The first line is not exactly ``METHOD SP URL SP HTTP/VERSION``."""

    def __init__(self, line: str):
        super().__init__(f"Malformed request line: {line!r}")
        self.line = line


class MalformedVersion(HTTPParseError):
    """The version field does not start with ``HTTP/``."""

    def __init__(self, version: str):
        super().__init__(f"Malformed HTTP version: {version!r}")
        self.version = version


class MalformedHeaderLine(HTTPParseError):
    """A header line has no ``:`` separating name and value."""

    def __init__(self, line: str):
        super().__init__(f"Malformed header line: {line!r}")
        self.line = line


class DanglingHeaderName(HTTPParseError):
    """A header name token was not immediately followed by its value."""

    def __init__(self, name: str):
        super().__init__(f"Expecting a value for header {name!r}")
        self.name = name


class InternalConsistencyViolation(RuntimeError):
    """
    The tokenizer and assembler disagree about the token stream.

    This is a bug, not bad input. Callers should log it and answer 500.
    """
