"""
Request handlers: business logic turning an HTTPRequest into an HTTPResponse.

A handler is any callable ``(HTTPRequest) -> HTTPResponse``.
"""

from .static import StaticFileHandler

__all__ = [
    "StaticFileHandler",
]
