"""Process-wide fatal error handling.

Errors that escape the request pipeline are logged and terminate the
process with exit code 1. Restarting is left to the process supervisor.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import threading
from types import TracebackType
from typing import Any, Callable

FATAL_EXIT_CODE = 1


class FatalErrorHandler:
    """Log-and-exit hooks for uncaught synchronous and asynchronous errors."""

    def __init__(
        self,
        logger: logging.Logger | None = None,
        exit_process: Callable[[int], Any] = os._exit,
    ):
        """Initialize fatal error handler.

        Args:
            logger: Logger receiving the fatal message.
            exit_process: Process termination function.
        """

        self._logger = logger or logging.getLogger("portal_api.fatal")
        self._exit_process = exit_process

    def runtime_install(self) -> None:
        """Install the synchronous hooks for the main thread and worker threads."""

        sys.excepthook = self.runtime_handle_uncaught_exception
        threading.excepthook = self._runtime_handle_thread_exception

    def runtime_install_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install the asynchronous hook on a running event loop.

        Args:
            loop: Event loop serving requests.
        """

        loop.set_exception_handler(self.runtime_handle_async_exception)

    def runtime_handle_uncaught_exception(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        self._logger.critical(
            "Uncaught exception: %s",
            _error_message(exc_value),
            exc_info=(exc_type, exc_value, exc_traceback),
        )
        self._exit_process(FATAL_EXIT_CODE)

    def runtime_handle_async_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        """Handle an asyncio failure nobody awaited.

        Args:
            loop: Loop reporting the failure.
            context: asyncio exception context (`message`, optional `exception`).
        """

        _ = loop
        exception = context.get("exception")
        message = _error_message(exception) if exception is not None else context.get("message", "unknown error")
        self._logger.critical(
            "Unhandled async exception: %s",
            message,
            exc_info=(type(exception), exception, exception.__traceback__) if exception is not None else None,
        )
        self._exit_process(FATAL_EXIT_CODE)

    def _runtime_handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_value is None:
            return
        self.runtime_handle_uncaught_exception(args.exc_type, args.exc_value, args.exc_traceback)


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__
