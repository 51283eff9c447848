"""
Logging setup for the sftp-treeops CLI.

Library modules only call logging.getLogger(__name__); handlers are installed
here, once, by the command-line entry point.
"""

import logging
import sys
from pathlib import Path

from .config import LogConfig

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# paramiko logs every channel open and packet at INFO/DEBUG
TRANSPORT_LOGGERS = ("paramiko",)


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(config: LogConfig) -> None:
    """
    Install the root handlers described by config.

    A file handler is added when config.file is set, and a stderr handler
    when config.console is true. Calling it again replaces earlier handlers.
    Unknown level names fall back to INFO.

    SSH transport chatter is only let through at DEBUG; at any other level
    the paramiko loggers are held at WARNING.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for old in root_logger.handlers[:]:
        root_logger.removeHandler(old)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(
            _handler(logging.FileHandler(log_path, mode="a", encoding="utf-8"), level)
        )

    if config.console:
        root_logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level))

    transport_level = logging.DEBUG if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
