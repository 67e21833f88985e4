"""
CORS policy for the edge proxy.

Decides, from the request's ``Origin`` header alone, whether cross-origin
access is granted and which headers express that decision:

- Exact allow-list of origins (production web app, custom domain, local
  development ports)
- Hostname-suffix rule for preview deployments on the hosting platform
- Allowed origins are echoed back together with credentials; ``*`` is never
  sent
- Unknown or missing origins get no CORS headers at all, so the browser
  blocks the read without the server advertising why

The policy is pure: the same origin always yields the same headers,
regardless of path or method.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import urlsplit

from starlette.datastructures import MutableHeaders

from festival_proxy.config import Settings

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
MAX_AGE = "Access-Control-Max-Age"
VARY = "Vary"

CORS_RESPONSE_HEADERS = (
    ALLOW_ORIGIN,
    ALLOW_CREDENTIALS,
    ALLOW_METHODS,
    ALLOW_HEADERS,
    MAX_AGE,
    "Access-Control-Expose-Headers",
)

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "[::1]", "::1"})


@dataclass(frozen=True)
class CorsDecision:
    """Outcome of matching one origin against the policy."""

    origin: Optional[str]
    allowed: bool
    development: bool = False


class CorsPolicy:
    """Origin allow-list with a trusted hostname-suffix rule."""

    def __init__(
        self,
        allowed_origins: Iterable[str],
        allowed_suffixes: Iterable[str] = (),
        allow_credentials: bool = True,
        allow_methods: Iterable[str] = ("GET", "OPTIONS"),
        allow_headers: Iterable[str] = ("Content-Type",),
        max_age: int = 86400,
        development_max_age: Optional[int] = None,
    ):
        """
        Initialize the policy.

        Args:
            allowed_origins: Origins allowed by exact string match
            allowed_suffixes: Hostname suffixes (with leading dot) allowed for previews
            allow_credentials: Whether to grant credentialed access
            allow_methods: Methods advertised to preflights
            allow_headers: Request headers advertised to preflights
            max_age: Preflight cache duration in seconds
            development_max_age: Preflight cache duration for loopback and preview origins
        """
        self.allowed_origins = frozenset(allowed_origins)
        self.allowed_suffixes: Tuple[str, ...] = tuple(s.lower() for s in allowed_suffixes)
        self.allow_credentials = allow_credentials
        self.allow_methods = ", ".join(allow_methods)
        self.allow_headers = ", ".join(allow_headers)
        self.max_age = max_age
        self.development_max_age = development_max_age

    @classmethod
    def from_settings(cls, settings: Settings) -> "CorsPolicy":
        return cls(
            allowed_origins=settings.cors_origins,
            allowed_suffixes=settings.cors_origin_suffixes,
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
            max_age=settings.cors_max_age,
            development_max_age=settings.cors_development_max_age,
        )

    def decide(self, origin: Optional[str]) -> CorsDecision:
        """
        Match an ``Origin`` header value against the policy.

        Args:
            origin: Raw header value, or None when the header is absent

        Returns:
            CorsDecision for the origin
        """
        if not origin:
            return CorsDecision(origin=None, allowed=False)

        hostname = _hostname(origin)

        if origin in self.allowed_origins:
            return CorsDecision(
                origin=origin,
                allowed=True,
                development=hostname in LOOPBACK_HOSTS,
            )

        if hostname and any(hostname.endswith(suffix) for suffix in self.allowed_suffixes):
            return CorsDecision(origin=origin, allowed=True, development=True)

        return CorsDecision(origin=origin, allowed=False)

    def headers_for(self, origin: Optional[str]) -> Dict[str, str]:
        """
        CORS headers to attach to any response for this origin.

        Returns an empty dict when the origin is not allowed.
        """
        decision = self.decide(origin)
        if not decision.allowed:
            return {}

        headers = {ALLOW_ORIGIN: decision.origin}
        if self.allow_credentials:
            headers[ALLOW_CREDENTIALS] = "true"
        headers[VARY] = "Origin"
        return headers

    def preflight_headers(self, origin: Optional[str]) -> Dict[str, str]:
        """Headers for a 204 preflight response."""
        decision = self.decide(origin)
        max_age = self.max_age
        if decision.development and self.development_max_age is not None:
            max_age = self.development_max_age

        headers = self.headers_for(origin)
        headers.update({
            ALLOW_METHODS: self.allow_methods,
            ALLOW_HEADERS: self.allow_headers,
            MAX_AGE: str(max_age),
        })
        return headers


def overlay_cors_headers(headers: MutableHeaders, cors_headers: Dict[str, str]) -> None:
    """
    Replace any CORS headers in ``headers`` with the local decision.

    Upstream CORS headers are dropped even when the local decision is to
    send none, so an upstream grant never leaks through to a disallowed
    origin.
    """
    for name in CORS_RESPONSE_HEADERS:
        if name in headers:
            del headers[name]

    for name, value in cors_headers.items():
        if name == VARY:
            _merge_vary(headers, value)
        else:
            headers[name] = value


def _merge_vary(headers: MutableHeaders, value: str) -> None:
    existing = headers.get(VARY)
    if not existing:
        headers[VARY] = value
        return

    tokens = [token.strip() for token in existing.split(",")]
    if value.lower() not in (token.lower() for token in tokens):
        headers[VARY] = f"{existing}, {value}"


def _hostname(origin: str) -> Optional[str]:
    try:
        return urlsplit(origin).hostname
    except ValueError:
        return None
