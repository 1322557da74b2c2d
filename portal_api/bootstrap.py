"""Application bootstrap wiring for startup validation and dependency assembly."""

import logging
from typing import Mapping

from fastapi import FastAPI

from portal_api.api import create_api_application
from portal_api.config import AppSettings
from portal_api.db import DatabaseConnectionPort, PyMongoDatabaseService
from portal_api.domain import RateLimitPolicy
from portal_api.routes import PortalContext, RouteGroupFactory, routes_default_factories
from portal_api.runtime import FatalErrorHandler

startup_logger = logging.getLogger("portal_api.startup")


def bootstrap_create_database_service(settings: AppSettings) -> PyMongoDatabaseService:
    """Build the process-wide database service from settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        PyMongoDatabaseService: Unconnected database service.
    """

    return PyMongoDatabaseService(
        mongodb_uri=settings.mongodb_uri,
        default_database=settings.mongodb_database,
        server_selection_timeout_ms=settings.mongodb_server_selection_timeout_ms,
    )


def bootstrap_connect_database(database: DatabaseConnectionPort) -> None:
    """Connect to the database exactly once and log the connected host.

    Args:
        database: Database service to connect.

    Raises:
        DatabaseConnectionError: Raised when the connection attempt fails.
    """

    connection_info = database.db_connect()
    startup_logger.info(f"MongoDB Connected: {connection_info.host}")


def bootstrap_create_context(settings: AppSettings, database: DatabaseConnectionPort) -> PortalContext:
    """Assemble the process-scoped context handed to route collaborators.

    Args:
        settings: Validated runtime settings.
        database: Database service shared for the process lifetime.

    Returns:
        PortalContext: Immutable context object.
    """

    return PortalContext(
        settings=settings,
        database=database,
        rate_limit_policy=RateLimitPolicy(
            window_ms=settings.rate_limit_window_ms,
            max_requests=settings.rate_limit_max_requests,
        ),
    )


def bootstrap_create_application(
    context: PortalContext,
    route_factories: Mapping[str, RouteGroupFactory] | None = None,
    fatal_handler: FatalErrorHandler | None = None,
) -> FastAPI:
    """Assemble the runtime application around an existing context.

    Args:
        context: Process-scoped context with a connected database service.
        route_factories: Route-group factories keyed by group name. Defaults to placeholders.
        fatal_handler: Fatal handler installed on the serving event loop.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        ValueError: Raised when a route group has no factory.
    """

    factories = dict(routes_default_factories())
    if route_factories:
        factories.update(route_factories)
    route_handlers = {group_name: factory(context) for group_name, factory in factories.items()}
    return create_api_application(
        context=context,
        route_handlers=route_handlers,
        fatal_handler=fatal_handler,
    )
