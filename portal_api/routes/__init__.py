"""Route-group collaborator contracts and default collaborators."""

from .interfaces import (
    ROUTE_GROUP_NAMES,
    PortalContext,
    RouteGroupError,
    RouteGroupFactory,
    RouteGroupHandler,
)
from .unavailable import UnavailableRouteGroupHandler, routes_default_factories

__all__ = [
    "ROUTE_GROUP_NAMES",
    "PortalContext",
    "RouteGroupError",
    "RouteGroupFactory",
    "RouteGroupHandler",
    "UnavailableRouteGroupHandler",
    "routes_default_factories",
]
