"""Place search: provider adapters, aggregation and deduplication."""

from .base import LocationProvider
from .gemini import GeminiLocationProvider, extract_json_array
from .models import AggregatedResult, LocationCandidate, SearchRequest, SearchResponse
from .open_meteo import OpenMeteoGeocodingProvider
from .resolver import (
    LocationResolver,
    SearchSession,
    build_resolver,
    dedupe_candidates,
    drop_uncorroborated_null_island,
)
from .weatherapi import WeatherAPISearchProvider

__all__ = [
    "AggregatedResult",
    "GeminiLocationProvider",
    "LocationCandidate",
    "LocationProvider",
    "LocationResolver",
    "OpenMeteoGeocodingProvider",
    "SearchRequest",
    "SearchResponse",
    "SearchSession",
    "WeatherAPISearchProvider",
    "build_resolver",
    "dedupe_candidates",
    "drop_uncorroborated_null_island",
    "extract_json_array",
]
