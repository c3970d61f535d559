"""Immutable snapshot of current conditions and a multi-day forecast."""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import WeatherProviderError


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Condition(_Frozen):
    text: str = ""
    code: int | None = None
    icon: str | None = None


class AirQuality(_Frozen):
    model_config = ConfigDict(populate_by_name=True)

    pm2_5: float | None = None
    pm10: float | None = None
    co: float | None = None
    no2: float | None = None
    so2: float | None = None
    o3: float | None = None
    us_epa_index: int | None = Field(default=None, alias="us-epa-index")


class SnapshotLocation(_Frozen):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    region: str = ""
    country: str
    latitude: float = Field(alias="lat")
    longitude: float = Field(alias="lon")
    localtime: str | None = None
    tz_id: str | None = None


class CurrentConditions(_Frozen):
    temp_c: float
    temp_f: float | None = None
    feelslike_c: float | None = None
    wind_kph: float = 0.0
    wind_degree: float | None = None
    wind_dir: str | None = None
    humidity: float | None = None
    pressure_mb: float | None = None
    vis_km: float | None = None
    uv: float | None = None
    cloud: float | None = None
    precip_mm: float = 0.0
    is_day: bool = True
    condition: Condition = Field(default_factory=Condition)
    air_quality: AirQuality | None = None


class DayOverview(_Frozen):
    maxtemp_c: float
    mintemp_c: float
    avgtemp_c: float | None = None
    maxwind_kph: float | None = None
    totalprecip_mm: float | None = None
    avghumidity: float | None = None
    daily_chance_of_rain: float | None = None
    uv: float | None = None
    condition: Condition = Field(default_factory=Condition)


class Astro(_Frozen):
    """Astronomical times as the provider's local time strings (``"06:12 AM"``)."""

    sunrise: str | None = None
    sunset: str | None = None
    moonrise: str | None = None
    moonset: str | None = None
    moon_phase: str | None = None
    moon_illumination: float | None = None


class HourlyEntry(_Frozen):
    time: str
    temp_c: float
    wind_kph: float | None = None
    precip_mm: float | None = None
    humidity: float | None = None
    chance_of_rain: float | None = None
    condition: Condition = Field(default_factory=Condition)


class ForecastDay(_Frozen):
    date: dt.date
    day: DayOverview
    astro: Astro = Field(default_factory=Astro)
    hours: tuple[HourlyEntry, ...] = ()


class WeatherSnapshot(_Frozen):
    """Normalized forecast payload shared by the fetch and display layers."""

    provider: str = "weatherapi"
    retrieved_at: dt.datetime
    location: SnapshotLocation
    current: CurrentConditions
    forecast_days: tuple[ForecastDay, ...] = ()

    @classmethod
    def from_weatherapi(
        cls,
        payload: dict[str, Any],
        retrieved_at: dt.datetime | None = None,
    ) -> WeatherSnapshot:
        """Build a snapshot from a WeatherAPI ``forecast.json`` response."""
        if not isinstance(payload, dict):
            raise WeatherProviderError(
                f"WeatherAPI forecast payload has unexpected type {type(payload).__name__}.",
                category="payload",
            )
        location = payload.get("location")
        current = payload.get("current")
        if not isinstance(location, dict):
            raise WeatherProviderError(
                "WeatherAPI forecast payload missing 'location' object.", category="payload"
            )
        if not isinstance(current, dict):
            raise WeatherProviderError(
                "WeatherAPI forecast payload missing 'current' object.", category="payload"
            )

        forecast = payload.get("forecast")
        raw_days = forecast.get("forecastday") if isinstance(forecast, dict) else None
        if raw_days is None:
            raw_days = []
        if not isinstance(raw_days, list):
            raise WeatherProviderError(
                "WeatherAPI forecast payload 'forecast.forecastday' is not a list.",
                category="payload",
            )

        try:
            days = sorted(
                (_normalize_day(item) for item in raw_days if isinstance(item, dict)),
                key=lambda d: d.date,
            )
            return cls(
                retrieved_at=retrieved_at or dt.datetime.now(dt.UTC),
                location=SnapshotLocation.model_validate(location),
                current=_normalize_current(current),
                forecast_days=tuple(days),
            )
        except ValidationError as exc:
            raise WeatherProviderError(
                f"WeatherAPI forecast payload failed validation: {exc.errors()[:3]}",
                category="payload",
            ) from exc

    @property
    def today(self) -> ForecastDay | None:
        return self.forecast_days[0] if self.forecast_days else None


def _normalize_current(current: dict[str, Any]) -> CurrentConditions:
    fields = dict(current)
    fields["is_day"] = bool(current.get("is_day", 1))
    return CurrentConditions.model_validate(fields)


def _normalize_day(item: dict[str, Any]) -> ForecastDay:
    hours = item.get("hour")
    return ForecastDay.model_validate(
        {
            "date": item.get("date"),
            "day": item.get("day"),
            "astro": item.get("astro") or {},
            "hours": [hour for hour in hours if isinstance(hour, dict)]
            if isinstance(hours, list)
            else [],
        }
    )
