"""WeatherAPI.com place search provider (primary, most authoritative)."""

from __future__ import annotations

from typing import Any

from ..exceptions import LocationProviderError
from ..weatherapi import request_with_key_rotation
from .base import LocationProvider
from .models import LocationCandidate


class WeatherAPISearchProvider(LocationProvider):
    """Normalizes ``search.json`` records ``{name, region, country, lat, lon, url}``."""

    name = "weatherapi"
    priority = 0

    async def fetch_candidates(self, query: str) -> list[LocationCandidate]:
        url = f"{str(self.settings.weatherapi_base_url).rstrip('/')}/search.json"
        payload = await request_with_key_rotation(
            self._client,
            url,
            keys=self.settings.weatherapi_key_list,
            params={"q": query},
            context="place search",
            logger=self.logger,
            error_cls=LocationProviderError,
        )
        if not isinstance(payload, list):
            raise LocationProviderError(
                f"weatherapi place search returned unexpected payload type "
                f"{type(payload).__name__}.",
                category="payload",
            )

        candidates: list[LocationCandidate] = []
        for index, record in enumerate(payload):
            if not isinstance(record, dict):
                continue
            candidate = self._normalize(index, record)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _normalize(self, index: int, record: dict[str, Any]) -> LocationCandidate | None:
        name = record.get("name")
        country = record.get("country")
        url = record.get("url")
        return self._build_candidate(
            index,
            name=name,
            region=record.get("region"),
            country=country,
            latitude=record.get("lat"),
            longitude=record.get("lon"),
            url=url if isinstance(url, str) and url else None,
        )
