"""Runtime package for logging setup and fatal error handling."""

from .fatal import FATAL_EXIT_CODE, FatalErrorHandler
from .logging_config import APPLICATION_LOGGER_NAME, configure_logging

__all__ = ["APPLICATION_LOGGER_NAME", "FATAL_EXIT_CODE", "FatalErrorHandler", "configure_logging"]
