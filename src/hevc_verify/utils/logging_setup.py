"""Root logging configuration for the CLI.

Console output goes to stderr through Rich's ``RichHandler`` when Rich
is importable, otherwise through a plain ``StreamHandler``.  An
optional run log file receives plain, timestamped lines.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
PACKAGE_LOGGER: str = "hevc_verify"


def _console_handler(console: Any | None) -> logging.Handler:
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler: logging.Handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        return handler

    return RichHandler(
        console=console if console is not None else Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    console: Any | None = None,
) -> None:
    """Configure the ``hevc_verify`` logger.

    - verbose: DEBUG level (every tool invocation is logged)
    - quiet: WARNING level
    - log_file: additionally write plain lines to this file at DEBUG
    - console: Rich console to share with progress displays
    Default level is INFO.
    """
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    if quiet:
        level = max(level, logging.WARNING)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if log_file is not None else level)

    console_handler = _console_handler(console)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
