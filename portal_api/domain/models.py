"""Typed domain models shared across runtime layers.

This module provides simple data contracts for cross-layer communication
between the HTTP pipeline, route-group collaborators and startup wiring.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
HEALTH_MESSAGE = "MCE Student Portal API is running!"
WELCOME_MESSAGE = "Welcome to MCE Student Portal API!"
NOT_FOUND_MESSAGE = "Route not found"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Fixed-window rate-limit policy applied to `/api/` requests.

    Attributes:
        window_ms: Window length in milliseconds.
        max_requests: Requests allowed per client identity within one window.
        message: Rejection message returned with HTTP 429.
    """

    window_ms: int
    max_requests: int
    message: str = RATE_LIMIT_MESSAGE

    @property
    def window_seconds(self) -> int:
        """Return the window rounded up to whole seconds (minimum one)."""

        return max(1, -(-self.window_ms // 1000))

    def rejection_payload(self) -> dict[str, Any]:
        """Return the fixed JSON envelope sent on violation."""

        return {"success": False, "message": self.message}


@dataclass(frozen=True)
class CorsPolicy:
    """Cross-origin policy for browser clients.

    Attributes:
        allow_origins: Exact origins granted cross-origin access.
        allow_methods: Methods advertised to preflight requests.
        allow_headers: Request headers advertised to preflight requests.
        allow_credentials: Whether cookies and auth headers are permitted.
    """

    allow_origins: tuple[str, ...]
    allow_methods: tuple[str, ...]
    allow_headers: tuple[str, ...]
    allow_credentials: bool = True


@dataclass(frozen=True)
class BodyLimits:
    """Size limits enforced by the body parsing stage.

    Attributes:
        json_limit_bytes: Maximum accepted JSON body size.
        urlencoded_limit_bytes: Maximum accepted URL-encoded body size.
    """

    json_limit_bytes: int
    urlencoded_limit_bytes: int


@dataclass(frozen=True)
class HealthPayload:
    """Liveness response contract for `GET /api/health`.

    Attributes:
        success: Always true while the process serves requests.
        message: Fixed liveness message.
        timestamp: ISO-8601 UTC timestamp with millisecond precision.
        environment: Runtime environment name, if configured.
    """

    success: bool
    message: str
    timestamp: str
    environment: str | None

    @classmethod
    def domain_build(cls, environment: str | None, now: datetime | None = None) -> "HealthPayload":
        """Build a health payload stamped with the current time.

        Args:
            environment: Runtime environment name.
            now: Optional clock override.

        Returns:
            HealthPayload: Payload ready for serialization.
        """

        moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        timestamp = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(success=True, message=HEALTH_MESSAGE, timestamp=timestamp, environment=environment)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.environment is not None:
            payload["environment"] = self.environment
        return payload


@dataclass(frozen=True)
class RouteGroupRequest:
    """Parsed request handed to a route-group collaborator.

    Attributes:
        method: Upper-case HTTP method.
        path: Path below the group prefix, always starting with `/`.
        query: Query-string parameters (last value wins).
        headers: Request headers with lower-case names.
        body: Parsed JSON or URL-encoded body, or None when the request had none.
        identity: Authenticated identity attached by an upstream stage, if any.
    """

    method: str
    path: str
    query: Mapping[str, str]
    headers: Mapping[str, str]
    body: Any = None
    identity: Any = None


@dataclass(frozen=True)
class RouteGroupResponse:
    """Response produced by a route-group collaborator.

    Attributes:
        status_code: HTTP status code.
        payload: JSON-serializable body.
        headers: Extra response headers.
    """

    status_code: int
    payload: Any
    headers: Mapping[str, str] = field(default_factory=dict)
