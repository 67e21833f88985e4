"""
Festival registry models.

Pydantic models describing the embedded ``festivals.json`` document served
to the client application. The models are used to validate the registry at
startup; the document itself is served as the original bytes.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Festival(BaseModel):
    """A single festival record."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(..., min_length=1, description="Unique festival identifier, e.g. cbf2025")
    name: str = Field(..., min_length=1, description="Display name")
    start_date: date = Field(..., description="First day of the festival")
    end_date: date = Field(..., description="Last day of the festival")
    data_base_url: str = Field(..., description="Base URL of the festival's beverage data")

    hashtag: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    description: Optional[str] = None
    website_url: Optional[str] = None
    hours: Optional[Dict[str, str]] = None
    available_beverage_types: List[str] = Field(default_factory=lambda: ["beer"])
    is_active: bool = False

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Festival ids become a single URL path segment."""
        if "/" in v or v.strip() != v:
            raise ValueError(f"festival id must be a single path segment, got: {v!r}")
        return v

    @field_validator("data_base_url")
    @classmethod
    def validate_data_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"data_base_url must be an http(s) URL, got: {v}")
        return v

    @model_validator(mode="after")
    def validate_date_range(self) -> "Festival":
        """The festival cannot end before it starts."""
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        return self


class FestivalRegistry(BaseModel):
    """The complete festival registry document."""

    model_config = ConfigDict(extra="allow", frozen=True)

    version: str = Field(..., min_length=1)
    last_updated: Optional[datetime] = None
    base_url: Optional[str] = None
    default_festival_id: str = Field(..., min_length=1)
    festivals: List[Festival] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_festival_ids(self) -> "FestivalRegistry":
        """Ids are unique and the default id names an existing festival."""
        seen = set()
        duplicates = []
        for festival in self.festivals:
            if festival.id in seen:
                duplicates.append(festival.id)
            seen.add(festival.id)

        if duplicates:
            raise ValueError(f"duplicate festival ids: {sorted(set(duplicates))}")

        if self.default_festival_id not in seen:
            raise ValueError(
                f"default_festival_id '{self.default_festival_id}' does not match any festival"
            )
        return self

    def get_festival(self, festival_id: str) -> Optional[Festival]:
        """Look up a festival by id."""
        for festival in self.festivals:
            if festival.id == festival_id:
                return festival
        return None

    @property
    def default_festival(self) -> Festival:
        """The festival the client opens by default."""
        return self.get_festival(self.default_festival_id)
