"""WeatherAPI.com forecast provider returning normalized snapshots."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import WeatherProviderError
from ..weatherapi import request_with_key_rotation
from .base import WeatherProvider
from .models import WeatherSnapshot


class WeatherAPIForecastProvider(WeatherProvider):
    """Fetches ``forecast.json`` with air quality and normalizes it."""

    provider_name = "weatherapi"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger("weather_dashboard.weather.weatherapi")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.forecast_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.http_user_agent,
            },
        )

    async def __aenter__(self) -> WeatherAPIForecastProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_forecast(self, query: str, *, days: int | None = None) -> WeatherSnapshot:
        """Fetch a forecast for a place name or ``"lat,lon"`` string."""
        cleaned = (query or "").strip()
        if not cleaned:
            raise WeatherProviderError("City parameter is required.", category="input")
        day_count = days if days is not None else self.settings.forecast_days
        if not (1 <= day_count <= 14):
            raise WeatherProviderError(
                f"Invalid day count {day_count}; expected between 1 and 14.", category="input"
            )

        url = f"{str(self.settings.weatherapi_base_url).rstrip('/')}/forecast.json"
        payload = await request_with_key_rotation(
            self._client,
            url,
            keys=self.settings.weatherapi_key_list,
            params={"q": cleaned, "days": day_count, "aqi": "yes", "alerts": "no"},
            context="forecast fetch",
            logger=self.logger,
            error_cls=WeatherProviderError,
        )
        snapshot = WeatherSnapshot.from_weatherapi(payload, retrieved_at=datetime.now(UTC))
        self.logger.info(
            "Fetched forecast for %s, %s (%d days)",
            snapshot.location.name, snapshot.location.country, len(snapshot.forecast_days),
        )
        return snapshot

    async def fetch_forecast_for_coordinates(
        self, latitude: float, longitude: float, *, days: int | None = None
    ) -> WeatherSnapshot:
        if not (-90 <= latitude <= 90):
            raise WeatherProviderError(
                f"Invalid latitude {latitude}; expected between -90 and 90.", category="input"
            )
        if not (-180 <= longitude <= 180):
            raise WeatherProviderError(
                f"Invalid longitude {longitude}; expected between -180 and 180.", category="input"
            )
        return await self.fetch_forecast(f"{latitude:.4f},{longitude:.4f}", days=days)
