import logging
import sys
from typing import Optional

from src.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stream handler to the root ``src`` logger.

    Safe to call more than once; only the first call installs the handler,
    later calls only change the level.

    Args:
        level (str, optional): Log level name, defaults to ``settings.log_level``
    """
    global _handler

    root = logging.getLogger("src")
    root.setLevel((level or settings.log_level).upper())

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger for the given module name."""
    return logging.getLogger(name)
