from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.DEBUG,
    also_console: bool = False,
) -> str:
    """Configure logging.

    The file log records every command and operator answer. Writing to
    /var/log needs root; for --check-only runs as a normal user we fall back
    to a file in the working directory.

    Console output for the operator is handled by lib.console; also_console
    additionally mirrors log records to the terminal (--verbose).

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_autoinstall_configured", False):
        return getattr(logger, "_autoinstall_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        fallback = str(Path.cwd() / PATHS.log_fallback_name)
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = RichHandler(show_path=False, markup=False)
        console.setLevel(logging.DEBUG)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_autoinstall_configured", True)
    setattr(logger, "_autoinstall_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
