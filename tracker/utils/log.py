"""
Logging utilities for the tracker.

Provides unified structured logging:
- pretty console output via Rich
- structured (JSON) file output to `serve.log` when running `tracker serve`
"""

import logging
import os
import sys
import json
from pathlib import Path

from rich.logging import RichHandler

LEVEL_ENV = "TRACKER_LOG_LEVEL"
FILE_LOG_COMMANDS = ("serve",)


class JSONFormatter(logging.Formatter):
    """
    Formatter that serializes log records to JSON.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level":     record.levelname,
            "logger":    record.name,
            "message":   record.getMessage(),
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """
    Return a configured logger for the given name.

    Attaches:
    - a RichHandler for console output
    - when the command is 'serve', a FileHandler writing JSON logs to {cwd}/serve.log

    Parameters
    ----------
    name
        Logger name (typically __name__).
    level
        Log level (int or string). Falls back to $TRACKER_LOG_LEVEL, then INFO.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    if level is None:
        level = os.environ.get(LEVEL_ENV, "INFO").upper()
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        console_handler = RichHandler(rich_tracebacks=True, show_path=False)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

        # the long-running server also keeps a JSON trail next to the database
        if len(sys.argv) > 1 and sys.argv[1] in FILE_LOG_COMMANDS:
            log_path = Path.cwd() / f"{sys.argv[1]}.log"
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)

    return logger
