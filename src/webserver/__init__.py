"""
=============================================================================
WEBSERVER
=============================================================================

A minimalistic HTTP/1.1 static file server.

=============================================================================
ARCHITECTURE
=============================================================================

    webserver/
    ├── __main__.py          # CLI: python -m webserver --config webserver.toml
    ├── config.py            # ServerConfig (TOML file / environment)
    ├── logs.py              # setup_logging()
    ├── server.py            # HTTPServer: connection → request → response
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   └── connection.py    # One client socket: read head, write response
    ├── handlers/
    │   └── static.py        # StaticFileHandler
    └── http/                # Pure message layer, no I/O
        ├── tokenizer.py     # request text → tokens
        ├── request.py       # tokens → HTTPRequest
        ├── response.py      # HTTPResponse → bytes
        ├── status_codes.py  # closed status vocabulary
        ├── headers.py       # closed response header vocabulary
        ├── errors.py        # parse error taxonomy
        ├── constants.py     # protocol version, allowed methods
        └── mime_types.py    # extension → Content-Type

=============================================================================
QUICK START
=============================================================================

    from webserver import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=8080, root_dir="./public"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ConfigError, ServerConfig
from .server import HTTPServer

__all__ = [
    "__version__",
    "ConfigError",
    "HTTPServer",
    "ServerConfig",
]
