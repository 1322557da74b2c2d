"""Fallback routes: bare OPTIONS responses and the catch-all 404."""

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from portal_api.domain import NOT_FOUND_MESSAGE


def api_create_options_router() -> APIRouter:
    """Create router answering non-preflight OPTIONS requests on any path with 204.

    CORS preflights never get here; the CORS stage answers them first.
    """

    router = APIRouter()

    @router.options("/{full_path:path}", include_in_schema=False)
    def api_options_any(full_path: str) -> Response:
        _ = full_path
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


def api_create_not_found_router() -> APIRouter:
    """Create the catch-all router. Must be included after every other router.

    Returns:
        APIRouter: Router answering any unmatched method and path with 404.
    """

    router = APIRouter()

    async def api_route_not_found(request: Request) -> JSONResponse:
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        return JSONResponse(
            content={
                "success": False,
                "message": NOT_FOUND_MESSAGE,
                "method": request.method,
                "url": url,
            },
            status_code=status.HTTP_404_NOT_FOUND,
        )

    # No method list: the route matches every method, including TRACE and extension methods.
    router.add_route("/{full_path:path}", api_route_not_found, methods=None, include_in_schema=False)
    return router
