"""Request-handling services.

This package contains the upstream client and the services built on it:
beverage-type discovery and transparent pass-through.
"""

from festival_proxy.services.upstream import UpstreamClient, UpstreamResponse
from festival_proxy.services.beverage_types import (
    BeverageTypeDiscoverer,
    beverage_types_from_links,
    extract_json_links,
)
from festival_proxy.services.forwarder import TransparentForwarder

__all__ = [
    "UpstreamClient",
    "UpstreamResponse",
    "BeverageTypeDiscoverer",
    "beverage_types_from_links",
    "extract_json_links",
    "TransparentForwarder",
]
