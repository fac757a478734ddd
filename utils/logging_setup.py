"""
Logging configuration for host applications and scripts.
"""

import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

PACKAGE_LOGGERS = ['core', 'models', 'utils', 'workflow']

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger for daylight calculations.

    Existing stream handlers are replaced so repeated calls do not duplicate
    output. Package loggers are reset to propagate to the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)
        log_file: Optional path of a log file to write alongside the console

    Returns:
        The configured root logger
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        if isinstance(handler, logging.StreamHandler):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(numeric_level)

    # Child loggers must propagate so the root handlers receive their records
    for logger_name in PACKAGE_LOGGERS:
        child_logger = logging.getLogger(logger_name)
        child_logger.setLevel(logging.NOTSET)
        child_logger.propagate = True
        for handler in child_logger.handlers[:]:
            child_logger.removeHandler(handler)

    logger.debug(f"Logging configured at {logging.getLevelName(numeric_level)}")
    return root_logger


class LoggingProgressSink:
    """Progress sink that writes ``(message, percent)`` reports to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.log = log or logging.getLogger('core.progress')
        self.level = level

    def __call__(self, message: str, percent: float) -> None:
        self.log.log(self.level, f"[{percent:5.1f}%] {message}")


def setup_logging_from_config(config: dict) -> logging.Logger:
    """Configure logging from the ``logging`` section of a config dict."""
    section = config.get('logging', {}) or {}
    return setup_logging(section.get('level', 'INFO'), section.get('file'))
