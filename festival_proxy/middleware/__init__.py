"""HTTP middleware and header policy.

This package contains the CORS policy applied to every response and the
request logging middleware.
"""

from festival_proxy.middleware.cors import CorsDecision, CorsPolicy, overlay_cors_headers
from festival_proxy.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "CorsDecision",
    "CorsPolicy",
    "overlay_cors_headers",
    "RequestLoggingMiddleware",
]
