"""Domain models used across application layer boundaries."""

from .models import (
    HEALTH_MESSAGE,
    NOT_FOUND_MESSAGE,
    RATE_LIMIT_MESSAGE,
    WELCOME_MESSAGE,
    BodyLimits,
    CorsPolicy,
    HealthPayload,
    RateLimitPolicy,
    RouteGroupRequest,
    RouteGroupResponse,
)

__all__ = [
    "BodyLimits",
    "CorsPolicy",
    "HealthPayload",
    "RateLimitPolicy",
    "RouteGroupRequest",
    "RouteGroupResponse",
    "HEALTH_MESSAGE",
    "NOT_FOUND_MESSAGE",
    "RATE_LIMIT_MESSAGE",
    "WELCOME_MESSAGE",
]
