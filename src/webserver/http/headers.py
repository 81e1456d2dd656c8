"""
=============================================================================
RESPONSE HEADERS
=============================================================================

The closed set of header kinds a response can carry.

Like HTTPStatus, headers are not free-form strings. Each kind is its own
small frozen dataclass with a fixed header name; the caller only
supplies the value:

    Allow("GET, POST, HEAD")           →  "Allow: GET, POST, HEAD"
    Server("webserver/1.0.0")          →  "Server: webserver/1.0.0"
    AcceptRanges("none")               →  "Accept-Ranges: none"
    ContentType("text/html")           →  "Content-Type: text/html"
    ContentLength(13)                  →  "Content-Length: 13"
    Date("Wed, 14 Feb 2018 11:27:44 GMT")  →  "Date: Wed, 14 Feb 2018 ..."

Values are checked on construction. A CR or LF inside a value would let
the caller smuggle extra header lines into the response, so it is
rejected with ValueError.

=============================================================================
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class ResponseHeader:
    """
    Base class of all response header kinds.

    Not usable on its own: instantiate one of the subclasses below.
    """

    name: ClassVar[str] = ""
    value: str

    def __post_init__(self):
        if not self.name:
            raise TypeError(
                f"{type(self).__name__} is not a concrete response header"
            )
        self._validate()

    def _validate(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(
                f"{self.name} value must be str, got {type(self.value).__name__}"
            )
        if "\r" in self.value or "\n" in self.value:
            raise ValueError(f"{self.name} value must not contain CR or LF")

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


@dataclass(frozen=True)
class Allow(ResponseHeader):
    """Allowed HTTP methods: ``Allow: GET, POST, HEAD``."""

    name: ClassVar[str] = "Allow"


@dataclass(frozen=True)
class Server(ResponseHeader):
    name: ClassVar[str] = "Server"


@dataclass(frozen=True)
class AcceptRanges(ResponseHeader):
    """``Accept-Ranges: none``"""

    name: ClassVar[str] = "Accept-Ranges"


@dataclass(frozen=True)
class ContentType(ResponseHeader):
    """``Content-Type: text/html; charset=utf-8``"""

    name: ClassVar[str] = "Content-Type"


@dataclass(frozen=True)
class ContentLength(ResponseHeader):
    """
    Body size in bytes.

    Never added automatically by the renderer; callers that want it
    append it explicitly.
    """

    name: ClassVar[str] = "Content-Length"
    value: int

    def _validate(self) -> None:
        # bool is an int subclass, but "Content-Length: True" is nonsense
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(
                f"Content-Length value must be int, got {type(self.value).__name__}"
            )
        if self.value < 0:
            raise ValueError(f"Content-Length must be >= 0, got {self.value}")


@dataclass(frozen=True)
class Date(ResponseHeader):
    """``Date: Wed, 14 Feb 2018 11:27:44 GMT``"""

    name: ClassVar[str] = "Date"
