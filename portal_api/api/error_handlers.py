"""Terminal exception handlers for the portal API.

Every error surfaced by a pipeline stage or a route-group collaborator is
turned into the `{success: false, message}` envelope. Stack traces are
logged server-side and never sent to the client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from portal_api.routes import RouteGroupError

logger = logging.getLogger("portal_api.errors")

INTERNAL_ERROR_MESSAGE = "Internal server error"


def register_error_handlers(app: FastAPI) -> None:
    """Register all terminal error handlers on the FastAPI app."""
    _register_route_group_error_handler(app)
    _register_http_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_route_group_error_handler(app: FastAPI) -> None:
    """Register collaborator business error handler."""

    @app.exception_handler(RouteGroupError)
    async def route_group_error_handler(request: Request, exc: RouteGroupError):
        logger.warning(f"RouteGroupError on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register framework HTTP error handler."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Invalid request data",
                "errors": [
                    {
                        "field": ".".join(str(loc) for loc in error["loc"]),
                        "message": error["msg"],
                    }
                    for error in exc.errors()
                ],
            },
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler for failures outside the route stack."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all handler that never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return error_internal_response()


def error_internal_response() -> JSONResponse:
    """Return the generic 500 envelope."""

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": INTERNAL_ERROR_MESSAGE},
    )


class UnhandledErrorMiddleware:
    """Innermost ASGI stage turning unexpected route failures into the 500 envelope.

    The response travels back through every outer stage, so it still gets
    security, CORS and rate-limit headers. Errors raised after the response
    has started are re-raised unchanged.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking_start(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking_start)
        except Exception as exc:
            if response_started:
                raise
            logger.error(
                f"Unhandled exception on {scope.get('method', '')} {scope.get('path', '')}: {exc}",
                exc_info=True,
            )
            await error_internal_response()(scope, receive, send)
