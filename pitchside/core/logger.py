"""
@file: logger.py
@description:
This module provides a unified logging system for the Pitchside API and workers, supporting:
- Color-coded console output for different log levels
- Consistent logging format across the API, Celery workers and the polling client
- Configurable log levels based on environment settings

@dependencies:
- logging: Standard Python logging module
- colorama: For cross-platform colored terminal text
- pitchside.core.config: For the default log level

@notes:
- Each component asks for its own named logger through setup_logger()
- Handlers are attached once per logger name
"""

import logging
import sys
from typing import Optional, Any

from colorama import init, Fore, Back, Style

from pitchside.core.config import settings

init(autoreset=True)

DEFAULT_LOG_LEVEL = settings.LOG_LEVEL


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name and message according to the record level.
    """

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.WHITE + Back.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with the color matching its level.

        The record is copied first so other handlers see the plain text.
        """
        color = self.COLORS.get(record.levelno, "")
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        colored.msg = f"{color}{record.getMessage()}{Style.RESET_ALL}"
        colored.args = None
        return super().format(colored)


def get_console_handler() -> logging.StreamHandler:
    """
    Create and configure a console handler with colored output.

    Returns:
        logging.StreamHandler: Configured console handler
    """
    console_handler = logging.StreamHandler(sys.stdout)
    log_format = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
    console_handler.setFormatter(ColoredFormatter(log_format, datefmt='%Y-%m-%d %H:%M:%S'))
    return console_handler


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with the specified name and level.

    Args:
        name: The logger name, typically a module path
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, uses the default from settings

    Returns:
        logging.Logger: Configured logger instance
    """
    if level is None:
        level = DEFAULT_LOG_LEVEL

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(numeric_level)
        logger.addHandler(get_console_handler())
        logger.propagate = False

    return logger


def setup_logger(name: str = "pitchside", level: Optional[str] = None) -> logging.Logger:
    """
    Set up and configure a logger with colored output.

    This is the function components call to create their loggers.
    """
    return get_logger(name, level)


def log_request_details(logger: logging.Logger, request: Any, response_time: float, status_code: int) -> None:
    """
    Log details about an HTTP request and its response.

    Args:
        logger: The logger to use
        request: The request object (expected to have method and url attributes)
        response_time: The time taken to process the request in seconds
        status_code: The HTTP status code of the response
    """
    method = getattr(request, 'method', 'UNKNOWN')
    url = getattr(request, 'url', 'UNKNOWN')
    message = f"{method} {url} completed with status {status_code} in {response_time:.3f}s"

    if status_code >= 500:
        logger.error(message)
    elif status_code >= 400:
        logger.warning(message)
    else:
        logger.info(message)


# Default application logger
logger = setup_logger()


def get_task_logger(task_name: str) -> logging.Logger:
    """
    Get a logger specifically for Celery tasks.

    Args:
        task_name: The name of the task

    Returns:
        logging.Logger: Configured logger for the task
    """
    return setup_logger(f"celery.task.{task_name}")


__all__ = ['setup_logger', 'logger', 'get_task_logger', 'log_request_details']
