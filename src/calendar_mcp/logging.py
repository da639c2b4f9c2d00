from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import LoggingSettings

FILE_HANDLER_NAME = "calendar_mcp.file"
STDERR_HANDLER_NAME = "calendar_mcp.stderr"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: LoggingSettings) -> Path:
    """Attach the rotating log file and a stderr handler to the root logger.

    Safe to call more than once; handlers are only added the first time.
    Nothing is written to stdout, which the stdio MCP transport owns.
    """

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
    installed = {handler.get_name() for handler in root.handlers}
    if FILE_HANDLER_NAME in installed:
        return settings.file

    settings.file.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(
        str(settings.file),
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    file_handler.set_name(FILE_HANDLER_NAME)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if STDERR_HANDLER_NAME not in installed:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.set_name(STDERR_HANDLER_NAME)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    logging.getLogger(__name__).debug("Logging configured. Output file: %s", settings.file)
    return settings.file


__all__ = ["configure_logging"]
