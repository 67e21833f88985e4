"""
Beverage-type discovery.

The upstream publishes one JSON file per beverage type in each festival's
directory but offers no endpoint listing them. The discoverer fetches the
directory index page and reads the ``.json`` links out of it.
"""

import re
from typing import List

import structlog

from festival_proxy.errors import (
    BeverageDiscoveryError,
    FestivalNotFoundError,
    exception_message,
)
from festival_proxy.models.responses import BeverageTypesResponse
from festival_proxy.services.upstream import UpstreamClient

logger = structlog.get_logger(__name__)

LISTING_FILENAME = "available_beverage_types"
JSON_SUFFIX = ".json"

# <a ... href="x.json" ...>, any attribute order, either quote style
_JSON_ANCHOR = re.compile(
    r"""<a\b[^>]*?\bhref\s*=\s*(?:"([^"]*\.json)"|'([^']*\.json)')[^>]*>""",
    re.IGNORECASE,
)


def extract_json_links(html: str) -> List[str]:
    """
    Return the ``href`` values of anchors that point at ``.json`` files.

    Links are returned in document order, without deduplication.

    Args:
        html: Directory index page

    Returns:
        List of href values
    """
    return [double or single for double, single in _JSON_ANCHOR.findall(html)]


def beverage_types_from_links(links: List[str]) -> List[str]:
    """Strip ``.json``, drop the listing's own file and sort by codepoint."""
    names = [link[: -len(JSON_SUFFIX)] for link in links]
    return sorted(name for name in names if name != LISTING_FILENAME)


class BeverageTypeDiscoverer:
    """Derives a festival's beverage types from the upstream directory index."""

    def __init__(self, upstream: UpstreamClient):
        """
        Args:
            upstream: Client for the festival data provider
        """
        self.upstream = upstream

    async def discover(self, festival_id: str) -> BeverageTypesResponse:
        """
        List the beverage types published for a festival.

        Args:
            festival_id: Festival directory name upstream

        Returns:
            BeverageTypesResponse with sorted type names and a UTC timestamp

        Raises:
            FestivalNotFoundError: The upstream returned a non-2xx status
            BeverageDiscoveryError: Fetching or parsing the listing raised
        """
        try:
            status, html = await self.upstream.get_text(f"/{festival_id}/")

            if not 200 <= status < 300:
                logger.info("festival_not_found", festival_id=festival_id, upstream_status=status)
                raise FestivalNotFoundError(festival_id)

            types = beverage_types_from_links(extract_json_links(html))

        except FestivalNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "beverage_type_discovery_failed",
                festival_id=festival_id,
                error=exception_message(e),
                error_type=e.__class__.__name__,
            )
            raise BeverageDiscoveryError(exception_message(e)) from e

        logger.info("beverage_types_discovered", festival_id=festival_id, count=len(types))
        return BeverageTypesResponse(festival_id=festival_id, available_beverage_types=types)
