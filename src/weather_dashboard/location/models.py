"""Typed models for place search candidates and aggregated results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocationCandidate(BaseModel):
    """One place match proposed by a single provider, before deduplication."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    region: str = ""
    country: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    source_id: str = Field(description="Opaque provider-scoped identifier for debugging")
    provider: str
    url: str | None = None

    @field_validator("name", "country", mode="before")
    @classmethod
    def strip_required_text(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("region", mode="before")
    @classmethod
    def region_defaults_to_empty(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @property
    def is_null_island(self) -> bool:
        """(0, 0) is the failure sentinel some geocoders return."""
        return self.latitude == 0 and self.longitude == 0

    @property
    def display_name(self) -> str:
        parts = [self.name]
        if self.region:
            parts.append(self.region)
        parts.append(self.country)
        return ", ".join(parts)


class AggregatedResult(BaseModel):
    """Deduplicated, bounded and ordered search results for one query."""

    model_config = ConfigDict(frozen=True)

    query: str
    results: tuple[LocationCandidate, ...] = ()
    used_fallback: bool = False


class SearchRequest(BaseModel):
    query: str = ""


class SearchResponse(BaseModel):
    results: list[LocationCandidate] = Field(default_factory=list)
