"""
Request dispatcher for the edge proxy.

Every inbound request is classified by an ordered list of routes, first
match wins:

1. ``preflight``        OPTIONS on any path
2. ``health``           /health
3. ``festivals``        /festivals.json, /festivals
4. ``metrics``          configured metrics path (when enabled)
5. ``beverage_types``   /{festival_id}/available_beverage_types.json
6. ``proxy``            anything else, forwarded upstream

The proxy route matches every request and is always last, so pass-through
is the explicit fallback rather than an accident of ordering.

Paths are matched as sent, percent-escapes intact, so routing and
forwarding read the same path.
"""

import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

import structlog
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from festival_proxy.errors import ProxyServiceError
from festival_proxy.middleware.cors import CorsPolicy, overlay_cors_headers
from festival_proxy.models.responses import HealthResponse
from festival_proxy.repositories.festival_registry import FestivalRegistryRepository
from festival_proxy.services.beverage_types import BeverageTypeDiscoverer
from festival_proxy.services.forwarder import TransparentForwarder, raw_request_path
from festival_proxy.shared.metrics import ProxyMetrics, get_metrics_handler

logger = structlog.get_logger(__name__)

FESTIVALS_CACHE_CONTROL = "no-cache, must-revalidate"
BEVERAGE_TYPES_CACHE_CONTROL = "public, max-age=3600"

FESTIVAL_PATHS = frozenset({"/festivals.json", "/festivals"})
BEVERAGE_TYPES_PATH = re.compile(r"^/(?P<festival_id>[^/]+)/available_beverage_types\.json$")

Matcher = Callable[[Request], Optional[Dict[str, str]]]
Handler = Callable[[Request, Dict[str, str]], Awaitable[Response]]


@dataclass(frozen=True)
class Route:
    """One dispatcher entry: a name, a matcher and a handler."""

    name: str
    match: Matcher
    handler: Handler


def method_is(method: str) -> Matcher:
    def matcher(request: Request) -> Optional[Dict[str, str]]:
        return {} if request.method == method else None
    return matcher


def path_in(paths) -> Matcher:
    paths = frozenset(paths)

    def matcher(request: Request) -> Optional[Dict[str, str]]:
        return {} if raw_request_path(request) in paths else None
    return matcher


def path_pattern(pattern: "re.Pattern[str]") -> Matcher:
    def matcher(request: Request) -> Optional[Dict[str, str]]:
        found = pattern.match(raw_request_path(request))
        return found.groupdict() if found else None
    return matcher


def any_request(request: Request) -> Dict[str, str]:
    return {}


class ProxyDispatcher:
    """Routes requests to the preflight, health, registry, discovery and proxy handlers."""

    def __init__(
        self,
        cors: CorsPolicy,
        registry: FestivalRegistryRepository,
        discoverer: BeverageTypeDiscoverer,
        forwarder: TransparentForwarder,
        metrics: Optional[ProxyMetrics] = None,
        metrics_path: str = "/_proxy/metrics",
    ):
        """
        Args:
            cors: CORS policy applied to every response
            registry: Embedded festival registry
            discoverer: Beverage-type discovery service
            forwarder: Transparent pass-through service
            metrics: Metrics recorder; the metrics route is only registered when set
            metrics_path: Path the metrics route answers on
        """
        self.cors = cors
        self.registry = registry
        self.discoverer = discoverer
        self.forwarder = forwarder
        self.metrics = metrics
        self.routes = self._build_routes(metrics_path)

    def _build_routes(self, metrics_path: str) -> List[Route]:
        routes = [
            Route("preflight", method_is("OPTIONS"), self.handle_preflight),
            Route("health", path_in({"/health"}), self.handle_health),
            Route("festivals", path_in(FESTIVAL_PATHS), self.handle_festivals),
        ]
        if self.metrics is not None:
            routes.append(Route("metrics", path_in({metrics_path}), self.handle_metrics))
        routes.extend([
            Route("beverage_types", path_pattern(BEVERAGE_TYPES_PATH), self.handle_beverage_types),
            Route("proxy", any_request, self.handle_proxy),
        ])
        return routes

    def resolve(self, request: Request):
        """Return the first route matching the request and its path parameters."""
        for route in self.routes:
            params = route.match(request)
            if params is not None:
                return route, params
        raise LookupError(f"no route for {request.method} {raw_request_path(request)}")

    async def dispatch(self, request: Request) -> Response:
        """
        Handle one request.

        Service errors are rendered as JSON envelopes here so that every
        response, success or failure, carries the same CORS headers.
        """
        route, params = self.resolve(request)
        origin = request.headers.get("origin")
        logger.debug(
            "request_routed",
            route=route.name,
            method=request.method,
            path=raw_request_path(request),
        )
        start_time = time.perf_counter()

        try:
            response = await route.handler(request, params)
        except ProxyServiceError as e:
            if self.metrics is not None and e.__cause__ is not None:
                self.metrics.upstream_errors.labels(
                    route=route.name,
                    error_type=e.__cause__.__class__.__name__,
                ).inc()
            response = JSONResponse(status_code=e.status_code, content=e.to_payload())

        if route.name != "preflight":
            overlay_cors_headers(response.headers, self.cors.headers_for(origin))

        if self.metrics is not None:
            self.metrics.requests.labels(
                route=route.name,
                method=request.method,
                status=str(response.status_code),
            ).inc()
            self.metrics.request_duration.labels(route=route.name).observe(
                time.perf_counter() - start_time
            )

        return response

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def handle_preflight(self, request: Request, params: Dict[str, str]) -> Response:
        return Response(
            status_code=204,
            headers=self.cors.preflight_headers(request.headers.get("origin")),
        )

    async def handle_health(self, request: Request, params: Dict[str, str]) -> Response:
        return JSONResponse(HealthResponse().model_dump())

    async def handle_festivals(self, request: Request, params: Dict[str, str]) -> Response:
        return Response(
            content=self.registry.raw,
            media_type="application/json",
            headers={"Cache-Control": FESTIVALS_CACHE_CONTROL},
        )

    async def handle_metrics(self, request: Request, params: Dict[str, str]) -> Response:
        render = get_metrics_handler(self.metrics.registry)
        return Response(content=render(), media_type=CONTENT_TYPE_LATEST)

    async def handle_beverage_types(self, request: Request, params: Dict[str, str]) -> Response:
        listing = await self.discoverer.discover(params["festival_id"])

        if self.metrics is not None:
            self.metrics.beverage_types_discovered.observe(len(listing.available_beverage_types))

        return JSONResponse(
            content=listing.model_dump(),
            headers={"Cache-Control": BEVERAGE_TYPES_CACHE_CONTROL},
        )

    async def handle_proxy(self, request: Request, params: Dict[str, str]) -> Response:
        return await self.forwarder.forward(request)
