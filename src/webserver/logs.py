"""
Logging setup for the server process.

Library code never configures logging; each module only does

    logger = logging.getLogger(__name__)

and the entry point calls setup_logging() once at startup.
"""

import logging
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Configure the root logger, and optionally a log file.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: If set, records are also appended to this file. Missing
                  parent directories are created.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    # Set webserver logger level
    logging.getLogger("webserver").setLevel(numeric_level)
