"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── webserver --port 3000                                      │
    │                                                                     │
    │   2. Configuration file (TOML)                                      │
    │      └── webserver --config webserver.toml                          │
    │                                                                     │
    │   3. Environment variables (used when no file is given)             │
    │      └── WEBSERVER_PORT=3000 webserver                              │
    │                                                                     │
    │   4. Default values (in this dataclass)                             │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONFIG FILE FORMAT
=============================================================================

Keys match the dataclass fields. They sit either all at the top level or
all in a [server] table, never mixed:

    [server]
    host = "0.0.0.0"
    port = 8080
    root_dir = "./public"
    log_level = "DEBUG"
    log_file = "log_files/webserver.log"

Unknown keys are an error: a typo such as "prot = 80" should fail at
startup, not silently run on the default port.

=============================================================================
"""

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

from . import __version__


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Configuration could not be loaded or is invalid."""


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK      host, port, backlog, buffer_size, timeout
    LIMITS       max_request_size, max_workers
    CONTENT      root_dir, index_file
    LOGGING      log_level, log_file
    IDENTITY     server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind to. "0.0.0.0" listens on all interfaces."""

    port: int = 8080

    backlog: int = 128
    """Maximum number of queued connections before new ones are refused."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: float = 30.0
    """Socket timeout in seconds for reading a request."""

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 64 * 1024  # 64 KB
    """
    Maximum size of the request head in bytes.
    Request bodies are never read, so this only bounds the header section.
    """

    max_workers: int = 16
    """Worker threads handling connections concurrently."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory the static file handler serves from."""

    index_file: str = "index.html"
    """File served for directory URLs such as "/"."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_file: Optional[str] = None
    """Also write logs to this file (its directory is created if missing)."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = f"webserver/{__version__}"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        WEBSERVER_HOST        Server host (default: 127.0.0.1)
        WEBSERVER_PORT        Server port (default: 8080)
        WEBSERVER_ROOT        Directory to serve (default: .)
        WEBSERVER_WORKERS     Worker threads (default: 16)
        WEBSERVER_LOG_LEVEL   Logging level (default: INFO)
        """
        try:
            return cls(
                host=os.getenv("WEBSERVER_HOST", "127.0.0.1"),
                port=int(os.getenv("WEBSERVER_PORT", "8080")),
                root_dir=os.getenv("WEBSERVER_ROOT", "."),
                max_workers=int(os.getenv("WEBSERVER_WORKERS", "16")),
                log_level=os.getenv("WEBSERVER_LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ServerConfig":
        """
        Load configuration from a TOML file.

        Relative root_dir and log_file values are kept as written, so they
        resolve against the working directory, not the config file.

        Raises:
            ConfigError: File missing, unparseable, or has unknown keys.
        """
        path = Path(path)
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

        if "server" in data:
            stray = sorted(key for key in data if key != "server")
            if stray:
                raise ConfigError(
                    f"Keys outside the [server] table in {path}: {', '.join(stray)}"
                )
            data = data["server"]
            if not isinstance(data, dict):
                raise ConfigError(f"[server] in {path} must be a table")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        """Create configuration from a mapping of field name → value."""
        types = {f.name: f.type for f in fields(cls)}
        unknown = sorted(set(data) - set(types))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        for name, value in data.items():
            if not _matches(value, types[name]):
                raise ConfigError(f"Invalid type for {name}: {value!r}")

        return cls(**data)

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately, not on the
        first request.

        Raises:
            ConfigError: On the first invalid value found.
        """
        if not isinstance(self.port, int) or not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535 (0 picks a free port).")

        if self.max_workers < 1:
            raise ConfigError("max_workers must be >= 1")

        if self.backlog < 1:
            raise ConfigError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ConfigError("buffer_size must be >= 1024")

        if self.timeout <= 0:
            raise ConfigError("timeout must be > 0")

        if self.max_request_size < 1:
            raise ConfigError("max_request_size must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid log_level: {self.log_level}. Must be one of {', '.join(LOG_LEVELS)}."
            )


def _matches(value: Any, expected: Any) -> bool:
    """Check a raw config value against a ServerConfig field annotation."""
    if expected == Optional[str]:
        return value is None or isinstance(value, str)
    if isinstance(value, bool):
        return expected is bool
    if expected is float:
        return isinstance(value, (int, float))
    return isinstance(value, expected)
