"""Provider-agnostic forecast interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import WeatherSnapshot


class WeatherProvider(ABC):
    """Base contract for forecast providers used by the dashboard."""

    @abstractmethod
    async def fetch_forecast(self, query: str, *, days: int | None = None) -> WeatherSnapshot:
        """Fetch and normalize a forecast snapshot."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release provider resources."""
