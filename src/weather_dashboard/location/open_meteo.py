"""Open-Meteo geocoding provider (free, secondary trust tier)."""

from __future__ import annotations

from typing import Any

from ..exceptions import LocationProviderError
from .base import LocationProvider
from .models import LocationCandidate


class OpenMeteoGeocodingProvider(LocationProvider):
    """Maps ``results[]`` of ``{name, admin1, admin2, country, latitude, longitude}``."""

    name = "open_meteo"
    priority = 1

    async def fetch_candidates(self, query: str) -> list[LocationCandidate]:
        url = f"{str(self.settings.open_meteo_geocoding_url).rstrip('/')}/v1/search"
        payload = await self._request_json(
            "GET",
            url,
            context="geocoding search",
            params={
                "name": query,
                "count": self.settings.open_meteo_result_count,
                "language": "en",
                "format": "json",
            },
        )
        if not isinstance(payload, dict):
            raise LocationProviderError(
                f"open_meteo geocoding search returned unexpected payload type "
                f"{type(payload).__name__}.",
                category="payload",
            )

        # The key is absent altogether when nothing matched.
        results = payload.get("results")
        if results is None:
            return []
        if not isinstance(results, list):
            raise LocationProviderError(
                "open_meteo geocoding payload 'results' is not a list.",
                category="payload",
            )

        candidates: list[LocationCandidate] = []
        for index, record in enumerate(results):
            if not isinstance(record, dict):
                continue
            candidate = self._normalize(index, record)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _normalize(self, index: int, record: dict[str, Any]) -> LocationCandidate | None:
        name = record.get("name")
        country = record.get("country")
        region = record.get("admin1") or record.get("admin2") or ""
        url = None
        if isinstance(name, str) and isinstance(country, str):
            url = self._slug(name, country)
        return self._build_candidate(
            index,
            name=name,
            region=region,
            country=country,
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
            url=url,
        )
