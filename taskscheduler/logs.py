"""
Logging setup for hosts embedding the scheduler.

Library modules only create module-level loggers; the host process calls
setup_logging() once to attach console and rotating file handlers.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from taskscheduler.config import LoggingConfig

CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Marks handlers installed here so repeated setup replaces them
_HANDLER_FLAG = '_taskscheduler_handler'


def setup_logging(config: Optional[LoggingConfig] = None, verbose: bool = False) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        config: Logging configuration (level, optional rotating log file)
        verbose: Force DEBUG level

    Returns:
        The configured root logger
    """
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    setattr(console_handler, _HANDLER_FLAG, True)
    root_logger.addHandler(console_handler)

    # File handler
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        setattr(file_handler, _HANDLER_FLAG, True)
        root_logger.addHandler(file_handler)

    # Route deprecation warnings (e.g. non-string parameters) into the log
    logging.captureWarnings(True)

    return root_logger
