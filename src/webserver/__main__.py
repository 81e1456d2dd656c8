"""
=============================================================================
WEBSERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webserver

    # Use a configuration file
    python -m webserver --config webserver.toml

    # Override single settings
    python -m webserver -c webserver.toml --port 3000 --root ./public

Exit codes:
    0   Clean shutdown
    1   Configuration could not be loaded or is invalid
    2   Server could not bind its address

=============================================================================
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from . import __version__
from .config import LOG_LEVELS, ConfigError, ServerConfig
from .logs import setup_logging
from .server import HTTPServer


logger = logging.getLogger("webserver")

EXIT_CONFIG_ERROR = 1
EXIT_BIND_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="A minimalistic HTTP server.",
    )

    parser.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="Location of configuration file in TOML format "
             "(default: WEBSERVER_* environment variables)",
    )
    parser.add_argument("--host", "-H", help="Host to bind to")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on")
    parser.add_argument("--root", "-r", dest="root_dir", help="Directory to serve")
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webserver {__version__}",
    )
    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """
    Build the effective configuration: file or environment, then CLI overrides.

    Raises:
        ConfigError: Loading or validation failed.
    """
    config = ServerConfig.from_file(args.config) if args.config else ServerConfig.from_env()

    overrides = {
        name: value
        for name in ("host", "port", "root_dir", "log_level")
        if (value := getattr(args, name)) is not None
    }
    config = replace(config, **overrides)
    config.validate()
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Problem reading config {args.config or '(environment)'}: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(config.log_level, config.log_file)

    try:
        server = HTTPServer(config)
    except ValueError as e:
        # Document root missing
        print(e, file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logger.info("Starting web server ...")
    try:
        server.bind()
    except OSError as e:
        print(e, file=sys.stderr)
        return EXIT_BIND_ERROR

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
