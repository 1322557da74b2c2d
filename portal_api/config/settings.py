"""Typed runtime settings with dotenv support and startup validation."""

import re

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CORS_ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://localhost:8080",
    "http://localhost:5173",
    "https://mce-student-portal-frontend-pink.vercel.app",
)
CORS_ALLOWED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
CORS_ALLOWED_HEADERS: tuple[str, ...] = ("Content-Type", "Authorization")

JSON_BODY_LIMIT_BYTES = 10 * 1024 * 1024
URLENCODED_BODY_LIMIT_BYTES = 100 * 1024

DEFAULT_RATE_LIMIT_WINDOW_MS = 15 * 60 * 1000
DEFAULT_RATE_LIMIT_MAX_REQUESTS = 100
DEFAULT_APPLICATION_PORT = 5003

_LEADING_INTEGER_PATTERN = re.compile(r"^\s*([+-]?\d+)")


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


def config_parse_lenient_int(raw_value: object, default: int) -> int:
    """Parse an integer leniently from an environment value.

    Leading digits are used (`"50abc"` -> 50). Values that carry no leading
    integer, are absent, or are not positive resolve to ``default``.

    Args:
        raw_value: Raw environment value.
        default: Fallback integer.

    Returns:
        int: Parsed positive integer or the fallback.
    """

    if raw_value is None or isinstance(raw_value, bool):
        return default
    if isinstance(raw_value, int):
        return raw_value if raw_value > 0 else default
    match = _LEADING_INTEGER_PATTERN.match(str(raw_value))
    if match is None:
        return default
    parsed_value = int(match.group(1))
    return parsed_value if parsed_value > 0 else default


class AppSettings(BaseSettings):
    """Application settings for the HTTP entry point and database connection.

    Environment variable names map directly to field names in uppercase.
    Example: `mongodb_uri` reads from `MONGODB_URI`.

    Attributes:
        node_env: Runtime environment label; `development` enables request logging.
        host: Host interface for web server binding.
        port: Web server port.
        log_level: Root level for the application logger.
        mongodb_uri: MongoDB connection string. Required to start serving.
        mongodb_database: Database name used when the URI carries none.
        mongodb_server_selection_timeout_ms: Driver wait before a connection attempt fails.
        rate_limit_window_ms: Rate-limit window length in milliseconds.
        rate_limit_max_requests: Requests allowed per client within one window.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    node_env: str | None = Field(default=None)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=DEFAULT_APPLICATION_PORT, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    mongodb_uri: str | None = Field(default=None)
    mongodb_database: str = Field(default="mce_student_portal", min_length=1)
    mongodb_server_selection_timeout_ms: int = Field(default=30000, ge=1)
    rate_limit_window_ms: int = Field(default=DEFAULT_RATE_LIMIT_WINDOW_MS)
    rate_limit_max_requests: int = Field(default=DEFAULT_RATE_LIMIT_MAX_REQUESTS)

    @field_validator("rate_limit_window_ms", mode="before")
    @classmethod
    def _parse_rate_limit_window(cls, value: object) -> int:
        return config_parse_lenient_int(value, DEFAULT_RATE_LIMIT_WINDOW_MS)

    @field_validator("rate_limit_max_requests", mode="before")
    @classmethod
    def _parse_rate_limit_max_requests(cls, value: object) -> int:
        return config_parse_lenient_int(value, DEFAULT_RATE_LIMIT_MAX_REQUESTS)

    @field_validator("port", mode="before")
    @classmethod
    def _default_blank_port(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_APPLICATION_PORT
        return value

    @field_validator("node_env", "mongodb_uri", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            stripped_value = value.strip()
            return stripped_value or None
        return value

    @property
    def is_development(self) -> bool:
        """Return whether development-only behavior is enabled."""

        return self.node_env == "development"


def config_load_settings(**overrides: object) -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Args:
        overrides: Explicit field values that take precedence over the environment.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings(**overrides)
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
