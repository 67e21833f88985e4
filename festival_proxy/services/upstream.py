"""
Upstream HTTP client for the festival data provider.

Wraps a single pooled aiohttp ``ClientSession`` owned by the application
lifespan. Only the configured ``User-Agent`` is sent upstream; caller
headers (including ``Origin``) are never forwarded.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import structlog
from aiohttp import ClientSession, ClientTimeout, TCPConnector

from festival_proxy.config import Settings

logger = structlog.get_logger(__name__)


@dataclass
class UpstreamResponse:
    """A fully read upstream response."""

    status: int
    reason: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str, default: str = None) -> str:
        """First value of a header, matched case-insensitively."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return default


class UpstreamClient:
    """Issues requests against the fixed upstream origin."""

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        follow_redirects: bool = True,
    ):
        """
        Args:
            base_url: Upstream origin, without trailing slash
            user_agent: User-Agent sent on every request
            timeout: Total request timeout (seconds)
            connect_timeout: Connection timeout (seconds)
            follow_redirects: Follow redirects instead of returning them
        """
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = ClientTimeout(total=timeout, connect=connect_timeout)
        self.follow_redirects = follow_redirects
        self.session: ClientSession = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "UpstreamClient":
        return cls(
            base_url=settings.upstream_url,
            user_agent=settings.upstream_user_agent,
            timeout=settings.upstream_timeout,
            connect_timeout=settings.upstream_connect_timeout,
            follow_redirects=settings.upstream_follow_redirects,
        )

    async def initialize(self) -> None:
        """Create the pooled session (idempotent)."""
        if self.session is None:
            self.session = ClientSession(
                connector=TCPConnector(ttl_dns_cache=300),
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                auto_decompress=True,
            )
            logger.info("upstream_session_opened", base_url=self.base_url)

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None
            logger.info("upstream_session_closed", base_url=self.base_url)

    def url_for(self, path_qs: str) -> str:
        """Concatenate the upstream origin with a path and query string verbatim."""
        return f"{self.base_url}{path_qs}"

    async def request(self, method: str, path_qs: str) -> UpstreamResponse:
        """
        Send a bodiless request and read the full response.

        Args:
            method: HTTP method to use upstream
            path_qs: Path plus query string, starting with "/"

        Returns:
            UpstreamResponse with status, reason, headers and body

        Raises:
            aiohttp.ClientError, asyncio.TimeoutError: On transport failure
        """
        await self.initialize()
        url = self.url_for(path_qs)

        async with self.session.request(
            method,
            url,
            allow_redirects=self.follow_redirects,
        ) as response:
            body = await response.read()
            headers = [(key, value) for key, value in response.headers.items()]

            logger.debug(
                "upstream_response",
                method=method,
                url=url,
                status=response.status,
                bytes=len(body),
            )

            return UpstreamResponse(
                status=response.status,
                reason=response.reason or "",
                headers=headers,
                body=body,
            )

    async def get_text(self, path: str) -> Tuple[int, str]:
        """
        GET a path and decode the body as text.

        Returns:
            (status, text) tuple; the text is empty for non-2xx responses
        """
        await self.initialize()
        url = self.url_for(path)

        async with self.session.get(url, allow_redirects=True) as response:
            if not 200 <= response.status < 300:
                logger.debug("upstream_non_success", url=url, status=response.status)
                return response.status, ""
            text = await response.text(errors="replace")
            return response.status, text
