"""Tests for API health and welcome endpoint behavior.

These tests validate that liveness never depends on database state.
"""

import re

from fastapi.testclient import TestClient

from portal_api.api.application import create_api_application
from portal_api.config import AppSettings
from portal_api.db import DatabaseConnectionInfo
from portal_api.domain import RateLimitPolicy
from portal_api.routes import PortalContext, UnavailableRouteGroupHandler

ISO_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class _ConnectedDatabaseService:
    """Test double that simulates a connected database."""

    def db_connect(self) -> DatabaseConnectionInfo:
        return DatabaseConnectionInfo(host="mongo.test", database_name="portal")

    def db_get_database(self) -> object:
        return object()

    def db_close(self) -> None:
        return None


class _BrokenDatabaseService:
    """Test double whose every call fails, proving health never touches it."""

    def db_connect(self) -> DatabaseConnectionInfo:
        raise ConnectionError("database unreachable")

    def db_get_database(self) -> object:
        raise ConnectionError("database unreachable")

    def db_close(self) -> None:
        raise ConnectionError("database unreachable")


def _build_settings(**overrides: object) -> AppSettings:
    """Create deterministic test settings.

    Returns:
        AppSettings: Settings for API creation.

    Raises:
        ValueError: Raised by AppSettings when values are invalid.
    """

    values: dict[str, object] = {"node_env": "test", "mongodb_uri": "mongodb://mongo.test:27017/portal"}
    values.update(overrides)
    return AppSettings(**values)


def _build_client(database: object, **settings_overrides: object) -> TestClient:
    settings = _build_settings(**settings_overrides)
    context = PortalContext(
        settings=settings,
        database=database,
        rate_limit_policy=RateLimitPolicy(window_ms=900000, max_requests=100),
    )
    handlers = {name: UnavailableRouteGroupHandler(name) for name in ("auth", "users", "events", "achievements")}
    return TestClient(create_api_application(context, handlers))


def test_api_health_returns_success_when_database_is_available() -> None:
    """Return HTTP 200 and the liveness payload.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client(_ConnectedDatabaseService())

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "MCE Student Portal API is running!"
    assert body["environment"] == "test"
    assert ISO_TIMESTAMP_PATTERN.match(body["timestamp"])


def test_api_health_returns_success_when_database_is_down() -> None:
    """Return HTTP 200 even when every database call would fail.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client(_BrokenDatabaseService())

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_api_health_omits_environment_when_unset() -> None:
    """Leave the environment key out when no environment name is configured."""

    client = _build_client(_ConnectedDatabaseService(), node_env="")

    response = client.get("/api/health")

    assert response.status_code == 200
    assert "environment" not in response.json()


def test_api_welcome_returns_fixed_payload() -> None:
    """Return the welcome payload on `GET /`."""

    client = _build_client(_ConnectedDatabaseService())

    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Welcome to MCE Student Portal API!"}
