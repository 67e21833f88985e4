"""
Transparent pass-through to the upstream.

Relays any request the dispatcher does not handle itself. Status and body
are passed through unchanged; upstream headers are kept apart from the
transport headers that no longer describe the relayed body. The caller's
CORS headers are overlaid by the dispatcher.
"""

import structlog
from starlette.requests import Request
from starlette.responses import Response

from festival_proxy.errors import UpstreamUnavailableError, exception_message
from festival_proxy.services.upstream import UpstreamClient, UpstreamResponse

logger = structlog.get_logger(__name__)

# aiohttp has already decoded and de-chunked the body
SKIPPED_RESPONSE_HEADERS = frozenset({
    "content-encoding",
    "content-length",
    "transfer-encoding",
    "connection",
    "keep-alive",
})


class TransparentForwarder:
    """Forwards requests to the upstream origin and relays the response."""

    def __init__(self, upstream: UpstreamClient, normalize_json_charset: bool = False):
        """
        Args:
            upstream: Client for the festival data provider
            normalize_json_charset: Add charset=utf-8 to bare application/json responses
        """
        self.upstream = upstream
        self.normalize_json_charset = normalize_json_charset

    async def forward(self, request: Request) -> Response:
        """
        Relay a request upstream.

        Args:
            request: Inbound request; only method, path and query are used

        Returns:
            Response carrying the upstream status, headers and body

        Raises:
            UpstreamUnavailableError: The upstream request raised
        """
        path_qs = raw_request_path(request)
        if request.url.query:
            path_qs = f"{path_qs}?{request.url.query}"

        try:
            upstream_response = await self.upstream.request(request.method, path_qs)
        except Exception as e:
            logger.warning(
                "upstream_fetch_failed",
                method=request.method,
                path=path_qs,
                error=exception_message(e),
                error_type=e.__class__.__name__,
            )
            raise UpstreamUnavailableError(exception_message(e)) from e

        return self.build_response(upstream_response)

    def build_response(self, upstream_response: UpstreamResponse) -> Response:
        """Turn an upstream response into the response relayed to the caller."""
        # ASGI carries no reason phrase; the server emits the standard one for the status
        response = Response(content=upstream_response.body, status_code=upstream_response.status)

        for key, value in upstream_response.headers:
            key_lower = key.lower()
            if key_lower in SKIPPED_RESPONSE_HEADERS:
                continue
            if key_lower == "content-type" and self.normalize_json_charset:
                value = _with_utf8_charset(value)
            response.headers.append(key, value)

        return response


def _with_utf8_charset(content_type: str) -> str:
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json" and "charset=" not in content_type.lower():
        return f"{content_type.rstrip('; ')}; charset=utf-8"
    return content_type


def raw_request_path(request: Request) -> str:
    """The request path exactly as sent, percent-escapes intact."""
    raw_path = request.scope.get("raw_path")
    return raw_path.decode("latin-1") if raw_path else request.url.path
