"""API router package for endpoint composition."""

from .fallback import api_create_not_found_router, api_create_options_router
from .health import api_create_health_router, api_create_welcome_router
from .route_groups import api_build_route_group_request, api_create_route_group_router

__all__ = [
    "api_build_route_group_request",
    "api_create_health_router",
    "api_create_not_found_router",
    "api_create_options_router",
    "api_create_route_group_router",
    "api_create_welcome_router",
]
