"""
FastAPI application entry point for the festival data edge proxy.

This module provides the application factory with:
- Festival registry loading and validation at startup
- Upstream session lifecycle (aiohttp connection pool)
- Request logging with correlation ids
- Prometheus metrics
- A single catch-all route handing every request to the dispatcher
- Graceful startup and shutdown
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from prometheus_client import CollectorRegistry

from festival_proxy.config import Settings, get_settings
from festival_proxy.dispatcher import ProxyDispatcher
from festival_proxy.middleware.cors import CorsPolicy, overlay_cors_headers
from festival_proxy.middleware.request_logging import RequestLoggingMiddleware
from festival_proxy.repositories.festival_registry import FestivalRegistryRepository
from festival_proxy.services.beverage_types import BeverageTypeDiscoverer
from festival_proxy.services.forwarder import TransparentForwarder
from festival_proxy.services.upstream import UpstreamClient
from festival_proxy.shared.logging import configure_logging
from festival_proxy.shared.metrics import ProxyMetrics

logger = structlog.get_logger(__name__)

PROXIED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    settings: Optional[Settings] = None,
    upstream: Optional[UpstreamClient] = None,
    registry: Optional[FestivalRegistryRepository] = None,
    metrics_registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Collaborators can be injected for testing; anything not supplied is
    built from ``settings``.

    Args:
        settings: Proxy settings (defaults to the cached environment settings)
        upstream: Upstream client (its session is managed by the app lifespan)
        registry: Festival registry (defaults to loading ``settings.registry_path``)
        metrics_registry: Prometheus registry for this app's metrics

    Returns:
        Configured FastAPI application

    Raises:
        RegistryError: If the festival registry is missing or invalid
    """
    settings = settings or get_settings()
    upstream = upstream or UpstreamClient.from_settings(settings)
    registry = registry or FestivalRegistryRepository.load(settings.registry_path)

    metrics = None
    if settings.metrics_enabled:
        metrics = ProxyMetrics(metrics_registry or CollectorRegistry())

    cors = CorsPolicy.from_settings(settings)
    dispatcher = ProxyDispatcher(
        cors=cors,
        registry=registry,
        discoverer=BeverageTypeDiscoverer(upstream),
        forwarder=TransparentForwarder(
            upstream,
            normalize_json_charset=settings.normalize_json_charset,
        ),
        metrics=metrics,
        metrics_path=settings.metrics_path,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the upstream session on startup and close it on shutdown."""
        logger.info(
            "application_starting",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
            upstream_url=settings.upstream_url,
        )

        try:
            await upstream.initialize()
            logger.info(
                "application_started",
                default_festival_id=registry.default_festival_id,
                routes=[route.name for route in dispatcher.routes],
            )
            yield

        except Exception as e:
            logger.error("application_startup_failed", error=str(e), exc_info=True)
            raise

        finally:
            logger.info("application_shutting_down")
            try:
                await upstream.close()
                logger.info("application_shutdown_complete")
            except Exception as e:
                logger.error("application_shutdown_failed", error=str(e), exc_info=True)

    # Docs routes would shadow upstream paths; everything is proxied instead
    # No debug mode: it would bypass the JSON 500 handler with an HTML traceback
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            "unexpected_exception",
            path=request.url.path,
            error=str(exc),
            exc_info=True,
        )
        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
        overlay_cors_headers(response.headers, cors.headers_for(request.headers.get("origin")))
        return response

    @app.api_route("/{full_path:path}", methods=PROXIED_METHODS, include_in_schema=False)
    async def handle(request: Request):
        return await dispatcher.dispatch(request)

    return app


def main():
    """
    Run the proxy with Uvicorn.

    Logging is configured before the app is built so registry validation
    messages are rendered the same way as request logs.
    """
    settings = get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment,
    )

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

    uvicorn.run(
        "festival_proxy.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
