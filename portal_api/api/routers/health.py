"""Built-in liveness and welcome endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from portal_api.config import AppSettings
from portal_api.domain import WELCOME_MESSAGE, HealthPayload


def api_create_health_router(settings: AppSettings) -> APIRouter:
    """Create health-check router exposing `GET /api/health`.

    Args:
        settings: Runtime settings providing the environment name.

    Returns:
        APIRouter: Router exposing the liveness endpoint.

    Raises:
        ValueError: Raised when settings is None.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/api/health")
    def api_health_status() -> JSONResponse:
        """Return the liveness payload. Never touches the database."""

        payload = HealthPayload.domain_build(environment=settings.node_env)
        return JSONResponse(content=payload.to_dict(), status_code=status.HTTP_200_OK)

    return router


def api_create_welcome_router() -> APIRouter:
    """Create router exposing the `GET /` welcome payload."""

    router = APIRouter(tags=["foundation"])

    @router.get("/")
    def api_welcome() -> JSONResponse:
        return JSONResponse(
            content={"success": True, "message": WELCOME_MESSAGE},
            status_code=status.HTTP_200_OK,
        )

    return router
