import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Args:
        component_name: Name of the component (e.g., 'assembler', 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)


class DebugLog:
    """
    Logging capability handed to the splitter and the merger.

    Messages are only emitted when ``debug_mode`` is set; otherwise every call
    is a no-op. Correctness of the caller never depends on it.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, debug_mode: bool = False):
        self.logger = logger or get_logger('chunkrelay')
        self.debug_mode = debug_mode

    def log(self, message: str, is_error: bool = False) -> None:
        if not self.debug_mode:
            return
        if is_error:
            self.logger.error(message)
        else:
            self.logger.info(message)


NULL_LOG = DebugLog(debug_mode=False)
