"""Forecast snapshot model and providers."""

from .base import WeatherProvider
from .models import (
    AirQuality,
    Astro,
    Condition,
    CurrentConditions,
    DayOverview,
    ForecastDay,
    HourlyEntry,
    SnapshotLocation,
    WeatherSnapshot,
)
from .weatherapi import WeatherAPIForecastProvider

__all__ = [
    "AirQuality",
    "Astro",
    "Condition",
    "CurrentConditions",
    "DayOverview",
    "ForecastDay",
    "HourlyEntry",
    "SnapshotLocation",
    "WeatherAPIForecastProvider",
    "WeatherProvider",
    "WeatherSnapshot",
]
