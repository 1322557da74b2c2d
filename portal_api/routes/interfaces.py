"""Typed interfaces for route-group collaborators.

Route groups (auth, users, events, achievements) are consumed by the entry
point through one request-in/response-out capability. Their internals live
outside this package.
"""

from dataclasses import dataclass
from typing import Callable, Protocol

from portal_api.config import AppSettings
from portal_api.db import DatabaseConnectionPort
from portal_api.domain import RateLimitPolicy, RouteGroupRequest, RouteGroupResponse

ROUTE_GROUP_NAMES: tuple[str, ...] = ("auth", "users", "events", "achievements")


class RouteGroupError(Exception):
    """Business error raised by a route-group collaborator.

    Attributes:
        status_code: HTTP status code sent to the client.
        message: Client-safe error message.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class PortalContext:
    """Process-scoped objects shared with route-group collaborators.

    Attributes:
        settings: Validated application settings.
        database: The single database connection service.
        rate_limit_policy: Active rate-limit policy for `/api/` paths.
    """

    settings: AppSettings
    database: DatabaseConnectionPort
    rate_limit_policy: RateLimitPolicy


class RouteGroupHandler(Protocol):
    """Port definition for one delegated route group."""

    async def route_handle(self, request: RouteGroupRequest) -> RouteGroupResponse:
        """Handle one request addressed to this route group.

        Args:
            request: Parsed request with the path relative to the group prefix.

        Returns:
            RouteGroupResponse: Status, JSON payload and extra headers.

        Raises:
            RouteGroupError: Raised for business errors with a client-facing status.
        """


RouteGroupFactory = Callable[[PortalContext], RouteGroupHandler]
