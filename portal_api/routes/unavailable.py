"""Placeholder collaborators used until a real route group is registered."""

from fastapi import status

from portal_api.domain import RouteGroupRequest, RouteGroupResponse

from .interfaces import ROUTE_GROUP_NAMES, PortalContext, RouteGroupFactory, RouteGroupHandler


class UnavailableRouteGroupHandler(RouteGroupHandler):
    """Route group that answers every request with 501 Not Implemented."""

    def __init__(self, group_name: str):
        if not group_name.strip():
            raise ValueError("group_name must not be blank")
        self.group_name = group_name

    async def route_handle(self, request: RouteGroupRequest) -> RouteGroupResponse:
        _ = request
        return RouteGroupResponse(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            payload={"success": False, "message": f"{self.group_name} routes are not available"},
        )


def routes_default_factories() -> dict[str, RouteGroupFactory]:
    """Return one placeholder factory per known route group.

    Returns:
        dict[str, RouteGroupFactory]: Factories keyed by group name, in dispatch order.
    """

    def _factory_for(group_name: str) -> RouteGroupFactory:
        def _build(context: PortalContext) -> RouteGroupHandler:
            _ = context
            return UnavailableRouteGroupHandler(group_name)

        return _build

    return {group_name: _factory_for(group_name) for group_name in ROUTE_GROUP_NAMES}
