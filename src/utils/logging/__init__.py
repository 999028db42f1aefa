__all__ = [
    "get_logger",
    "configure_logging",
]

from src.utils.logging.std_logger import configure_logging, get_logger
