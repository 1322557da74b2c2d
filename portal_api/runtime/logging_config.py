"""
Logging configuration for the MCE Student Portal API.

This module provides:
- One stdout handler shared by the application and uvicorn loggers
- Timestamp, level, and logger name on every line
"""

from __future__ import annotations

import logging
import sys

APPLICATION_LOGGER_NAME = "portal_api"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure logging for the application.

    Sets up a logger with:
    - Timestamp, level, and logger name information
    - The same handler on the uvicorn logger tree

    Calling it again replaces the handlers instead of stacking them.
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logger = logging.getLogger(APPLICATION_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers = [handler]

    # uvicorn.error and uvicorn.access propagate here
    uvicorn_logger = logging.getLogger("uvicorn")
    uvicorn_logger.setLevel(logger.level)
    uvicorn_logger.handlers = [handler]

    return logger
