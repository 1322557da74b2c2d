"""Configuration package for runtime settings and startup validation."""

from .settings import (
    CORS_ALLOWED_HEADERS,
    CORS_ALLOWED_METHODS,
    CORS_ALLOWED_ORIGINS,
    JSON_BODY_LIMIT_BYTES,
    URLENCODED_BODY_LIMIT_BYTES,
    AppSettings,
    SettingsLoadError,
    config_load_settings,
    config_parse_lenient_int,
)

__all__ = [
    "AppSettings",
    "SettingsLoadError",
    "config_load_settings",
    "config_parse_lenient_int",
    "CORS_ALLOWED_ORIGINS",
    "CORS_ALLOWED_METHODS",
    "CORS_ALLOWED_HEADERS",
    "JSON_BODY_LIMIT_BYTES",
    "URLENCODED_BODY_LIMIT_BYTES",
]
