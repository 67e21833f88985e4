"""Response bodies produced by the proxy itself (not relayed from upstream)."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field


def utc_timestamp(now: datetime = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HealthResponse(BaseModel):
    """Liveness probe body."""

    status: str = "ok"


class BeverageTypesResponse(BaseModel):
    """Derived beverage-type listing for one festival."""

    festival_id: str = Field(..., min_length=1)
    available_beverage_types: List[str]
    timestamp: str = Field(default_factory=utc_timestamp)
