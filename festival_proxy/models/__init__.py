"""Data models for the edge proxy.

This package contains Pydantic models for the festival registry and for
the JSON bodies the proxy generates itself.
"""

from festival_proxy.models.festival import Festival, FestivalRegistry
from festival_proxy.models.responses import BeverageTypesResponse, HealthResponse, utc_timestamp

__all__ = [
    "Festival",
    "FestivalRegistry",
    "BeverageTypesResponse",
    "HealthResponse",
    "utc_timestamp",
]
