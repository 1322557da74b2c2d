"""Request pipeline middleware stages."""

from .body_parsing import BodyParsingMiddleware, parse_json_body, parse_urlencoded_body
from .cors import PortalCORSMiddleware
from .rate_limit import RateLimitMiddleware
from .request_logging import RequestLoggingMiddleware
from .security_headers import SECURITY_HEADERS, SecurityHeadersMiddleware

__all__ = [
    "BodyParsingMiddleware",
    "PortalCORSMiddleware",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "SECURITY_HEADERS",
    "parse_json_body",
    "parse_urlencoded_body",
]
