"""
Logging Utilities

Sets up the application's log handlers and provides a decorator that logs
the start, end and failure of an operation.
"""

import inspect
import logging
import sys
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = "bookapp.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUP_COUNT = 5

_configured = False


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Configure the root logger with a console handler and, when log_dir is
    given, a rotating file handler. Safe to call more than once.

    Args:
        level: Log level name
        log_dir: Directory for the rotating log file
    """
    global _configured
    if _configured:
        return

    log_formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(log_formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    _configured = True
    logging.getLogger(__name__).info(
        f"Logging initialized{f': {log_dir / LOG_FILE_NAME}' if log_dir else ''}"
    )


def log_operation(operation_name: str):
    """
    Decorator to log operation start/end/failure.

    Args:
        operation_name: Name of the operation

    Example:
        @log_operation("seed_database")
        def seed_database_four_books(db):
            ...
    """
    def decorator(func):
        logger = logging.getLogger(func.__module__)

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger.debug(f"Starting {operation_name}")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Failed {operation_name}: {type(e).__name__}: {e}", exc_info=True)
                raise
            logger.debug(f"Completed {operation_name}")
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger.debug(f"Starting {operation_name}")
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Failed {operation_name}: {type(e).__name__}: {e}", exc_info=True)
                raise
            logger.debug(f"Completed {operation_name}")
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
