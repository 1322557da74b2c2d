"""Main module entrypoint for local runtime execution.

This module validates startup configuration, connects to the database and
launches the FastAPI service. Any startup failure exits with status 1
before the HTTP port is bound.
"""

import argparse
import logging
from typing import Sequence

import uvicorn

from portal_api.bootstrap import (
    bootstrap_connect_database,
    bootstrap_create_application,
    bootstrap_create_context,
    bootstrap_create_database_service,
)
from portal_api.config import SettingsLoadError, config_load_settings
from portal_api.db import DatabaseConnectionError
from portal_api.runtime import FATAL_EXIT_CODE, FatalErrorHandler, configure_logging

startup_logger = logging.getLogger("portal_api.startup")


def main(argv: Sequence[str] | None = None) -> None:
    """Run the API server with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to the process arguments.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with status 1 when settings or the database connection fail.
    """

    argument_parser = argparse.ArgumentParser(description="MCE Student Portal API server")
    argument_parser.add_argument("--host", dest="host", type=str, help="Override HOST for the listener")
    argument_parser.add_argument("--port", dest="port", type=int, help="Override PORT for the listener")
    parsed_arguments = argument_parser.parse_args(argv)

    overrides = {
        name: value
        for name, value in (("host", parsed_arguments.host), ("port", parsed_arguments.port))
        if value is not None
    }
    try:
        settings = config_load_settings(**overrides)
    except SettingsLoadError as error:
        configure_logging()
        startup_logger.error(str(error))
        raise SystemExit(FATAL_EXIT_CODE) from error

    configure_logging(settings.log_level)
    fatal_handler = FatalErrorHandler()
    fatal_handler.runtime_install()

    database = bootstrap_create_database_service(settings)
    try:
        bootstrap_connect_database(database)
    except DatabaseConnectionError as error:
        startup_logger.error(f"Database connection error: {error}")
        raise SystemExit(FATAL_EXIT_CODE) from error

    context = bootstrap_create_context(settings, database)
    application = bootstrap_create_application(context, fatal_handler=fatal_handler)
    uvicorn.run(
        application,
        host=settings.host,
        port=settings.port,
        log_config=None,
        server_header=False,
    )


if __name__ == "__main__":
    main()
