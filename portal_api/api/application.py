"""FastAPI application factory for the portal HTTP entry point.

This module composes the request pipeline in its fixed order: security
headers, compression, rate limiting, CORS, body parsing, development request
logging, then routing and the terminal error handlers.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Mapping

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from portal_api.config import (
    CORS_ALLOWED_HEADERS,
    CORS_ALLOWED_METHODS,
    CORS_ALLOWED_ORIGINS,
    JSON_BODY_LIMIT_BYTES,
    URLENCODED_BODY_LIMIT_BYTES,
)
from portal_api.domain import BodyLimits, CorsPolicy
from portal_api.routes import ROUTE_GROUP_NAMES, PortalContext, RouteGroupHandler
from portal_api.runtime import FatalErrorHandler

from .error_handlers import UnhandledErrorMiddleware, register_error_handlers
from .middleware import (
    BodyParsingMiddleware,
    PortalCORSMiddleware,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from .routers import (
    api_create_health_router,
    api_create_not_found_router,
    api_create_options_router,
    api_create_route_group_router,
    api_create_welcome_router,
)

COMPRESSION_MINIMUM_SIZE_BYTES = 1024

startup_logger = logging.getLogger("portal_api.startup")


def api_default_cors_policy() -> CorsPolicy:
    """Return the fixed browser CORS policy."""

    return CorsPolicy(
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
        allow_credentials=True,
    )


def create_api_application(
    context: PortalContext,
    route_handlers: Mapping[str, RouteGroupHandler],
    fatal_handler: FatalErrorHandler | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        context: Process-scoped settings, database service and rate-limit policy.
        route_handlers: One collaborator per route group name.
        fatal_handler: Optional fatal handler installed on the serving event loop.

    Returns:
        FastAPI: Application with the full request pipeline.

    Raises:
        ValueError: Raised when a route group has no handler.
    """

    missing_groups = [group_name for group_name in ROUTE_GROUP_NAMES if group_name not in route_handlers]
    if missing_groups:
        raise ValueError(f"route handlers missing for: {', '.join(missing_groups)}")

    settings = context.settings

    @asynccontextmanager
    async def lifespan(_application: FastAPI):
        if fatal_handler is not None:
            fatal_handler.runtime_install_loop(asyncio.get_running_loop())
        startup_logger.info(f"Server running on port {settings.port}")
        startup_logger.info("MCE Student Portal API ready for students!")
        startup_logger.info(f"Environment: {settings.node_env}")
        yield
        context.database.db_close()

    application = FastAPI(
        title="MCE Student Portal API",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Starlette runs the last added middleware first.
    application.add_middleware(UnhandledErrorMiddleware)
    if settings.is_development:
        application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        BodyParsingMiddleware,
        limits=BodyLimits(
            json_limit_bytes=JSON_BODY_LIMIT_BYTES,
            urlencoded_limit_bytes=URLENCODED_BODY_LIMIT_BYTES,
        ),
    )
    cors_policy = api_default_cors_policy()
    application.add_middleware(
        PortalCORSMiddleware,
        allow_origins=list(cors_policy.allow_origins),
        allow_methods=list(cors_policy.allow_methods),
        allow_headers=list(cors_policy.allow_headers),
        allow_credentials=cors_policy.allow_credentials,
    )
    application.add_middleware(RateLimitMiddleware, policy=context.rate_limit_policy)
    application.add_middleware(GZipMiddleware, minimum_size=COMPRESSION_MINIMUM_SIZE_BYTES)
    application.add_middleware(SecurityHeadersMiddleware)

    application.include_router(api_create_options_router())
    application.include_router(api_create_health_router(settings=settings))
    for group_name in ROUTE_GROUP_NAMES:
        application.include_router(api_create_route_group_router(group_name, route_handlers[group_name]))
    application.include_router(api_create_welcome_router())
    application.include_router(api_create_not_found_router())

    register_error_handlers(application)
    return application
