# roomchat/core/logging.py

import logging
import os
import sys
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that are chatty at INFO during normal chat traffic
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "websockets": logging.WARNING,
    "watchfiles": logging.WARNING,
}


def setup_logging(level_name: Optional[str] = None) -> None:
    """
    Configure application-wide logging for the chat server.

    - Level comes from ``level_name``, else LOG_LEVEL, else INFO
    - One stdout handler on the root logger; roomchat.* loggers propagate to it
    - Per-message routing logs are DEBUG, so INFO shows only lifecycle events
      (connections opened/closed, joins, disconnects)
    """
    log_level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level_name, logging.INFO)

    # If logging is already configured (e.g. by Uvicorn), don't re-add handlers
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, level))


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Helper to get a logger with our app's configuration applied.

    Usage:
        from roomchat.core.logging import get_logger

        logger = get_logger(__name__)
        logger.info("alice joined general")
    """
    return logging.getLogger(name)
