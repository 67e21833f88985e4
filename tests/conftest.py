"""Shared fixtures for the edge proxy test-suite."""

from typing import Dict, List, Optional, Tuple, Union

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from festival_proxy.config import Settings
from festival_proxy.main import create_app
from festival_proxy.services.upstream import UpstreamClient, UpstreamResponse

UPSTREAM = "https://data.cambridgebeerfestival.com"
PRODUCTION_ORIGIN = "https://cambeerfestival.app"


def make_directory_html(files: List[str]) -> str:
    """Apache-style directory index listing the given file names."""
    links = "\n".join(f'<a href="{name}">{name}</a>' for name in files)
    return f"""
<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 3.2 Final//EN">
<html><head><title>Index of /cbf2025</title></head>
<body><h1>Index of /cbf2025</h1>
<pre>Name                    Last modified      Size  Description
<hr>
<a href="/">Parent Directory</a>                             -
{links}
<hr></pre></body></html>"""


class FakeUpstream(UpstreamClient):
    """Upstream double serving canned responses keyed by path and query.

    A value may be an ``UpstreamResponse`` or an exception instance, which
    is raised when the path is requested.
    """

    def __init__(self):
        super().__init__(base_url=UPSTREAM, user_agent="test-agent")
        self.routes: Dict[str, Union[UpstreamResponse, Exception]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.initialized = False
        self.closed = False

    def reply(
        self,
        path_qs: str,
        status: int = 200,
        body: Union[bytes, str] = b"",
        headers: Optional[List[Tuple[str, str]]] = None,
        reason: str = "OK",
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[path_qs] = UpstreamResponse(
            status=status,
            reason=reason,
            headers=headers or [],
            body=body,
        )

    def fail(self, path_qs: str, error: Exception) -> None:
        self.routes[path_qs] = error

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    def _lookup(self, path_qs: str) -> UpstreamResponse:
        route = self.routes.get(path_qs)
        if route is None:
            return UpstreamResponse(status=404, reason="Not Found", body=b"Not Found")
        if isinstance(route, Exception):
            raise route
        return route

    async def request(self, method: str, path_qs: str) -> UpstreamResponse:
        self.calls.append((method, path_qs))
        return self._lookup(path_qs)

    async def get_text(self, path: str) -> Tuple[int, str]:
        self.calls.append(("GET", path))
        response = self._lookup(path)
        if not response.ok:
            return response.status, ""
        return response.status, response.body.decode("utf-8", errors="replace")


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, isolated from the environment's .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def app(settings, upstream):
    return create_app(settings=settings, upstream=upstream, metrics_registry=CollectorRegistry())


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fetch(client):
    """GET (or other method) a path with the production origin by default."""

    def _fetch(path: str, origin: Optional[str] = PRODUCTION_ORIGIN, method: str = "GET"):
        headers = {"Origin": origin} if origin else {}
        return client.request(method, path, headers=headers)

    return _fetch
