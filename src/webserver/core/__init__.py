"""
Transport layer: the listening socket and per-client connections.

The HTTP message layer never touches a socket; everything that blocks
lives here.
"""

from .connection import Connection, ConnectionState, RequestTooLarge
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
    "SocketServer",
]
