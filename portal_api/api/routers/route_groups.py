"""Router composition for delegated route groups."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from portal_api.domain import RouteGroupRequest
from portal_api.routes import RouteGroupHandler

ROUTE_GROUP_METHODS: list[str] = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]


def api_build_route_group_request(request: Request, sub_path: str) -> RouteGroupRequest:
    """Translate a framework request into the collaborator request contract.

    Args:
        request: Incoming framework request, after body parsing.
        sub_path: Path below the group prefix, without a leading slash.

    Returns:
        RouteGroupRequest: Parsed request for the collaborator.
    """

    return RouteGroupRequest(
        method=request.method.upper(),
        path=f"/{sub_path}",
        query=dict(request.query_params),
        headers={name.lower(): value for name, value in request.headers.items()},
        body=getattr(request.state, "parsed_body", None),
        identity=getattr(request.state, "identity", None),
    )


def api_create_route_group_router(group_name: str, handler: RouteGroupHandler) -> APIRouter:
    """Create a router that forwards every request under `/api/<group_name>` to one handler.

    Args:
        group_name: Route group name used as the path segment.
        handler: Collaborator handling the group's requests.

    Returns:
        APIRouter: Router with catch-all routes for the group prefix.

    Raises:
        ValueError: Raised when group_name is blank or handler is None.
    """

    if not group_name.strip() or "/" in group_name:
        raise ValueError("group_name must be a single non-blank path segment")
    if handler is None:
        raise ValueError("handler must not be None")

    router = APIRouter(prefix=f"/api/{group_name}", tags=[group_name])

    async def api_route_group_forward(request: Request, sub_path: str) -> JSONResponse:
        """Forward the request to the collaborator and serialize its response.

        Raises:
            RouteGroupError: Propagated to the terminal error handler.
        """

        group_response = await handler.route_handle(api_build_route_group_request(request, sub_path))
        return JSONResponse(
            content=group_response.payload,
            status_code=group_response.status_code,
            headers=dict(group_response.headers),
        )

    async def api_route_group_root(request: Request) -> JSONResponse:
        return await api_route_group_forward(request, "")

    async def api_route_group_nested(request: Request, sub_path: str) -> JSONResponse:
        return await api_route_group_forward(request, sub_path)

    router.add_api_route("", api_route_group_root, methods=ROUTE_GROUP_METHODS, include_in_schema=False)
    router.add_api_route(
        "/{sub_path:path}",
        api_route_group_nested,
        methods=ROUTE_GROUP_METHODS,
        include_in_schema=False,
    )
    return router
