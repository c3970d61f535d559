"""Lookup tables mapping air quality, UV, wind and hazard readings to display labels."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict

KPH_TO_MPH = 0.621371


class Classification(BaseModel):
    """Label plus an ordinal severity tier (0 = unknown, higher = worse)."""

    model_config = ConfigDict(frozen=True)

    label: str
    severity_tier: int


class BeaufortReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    scale: int
    description: str


UNKNOWN = Classification(label="Unknown", severity_tier=0)

_AQI_LABELS: dict[int, str] = {
    1: "Good",
    2: "Moderate",
    3: "Unhealthy (Sensitive)",
    4: "Unhealthy",
    5: "Very Unhealthy",
    6: "Hazardous",
}

_AQI_DESCRIPTIONS: dict[int, str] = {
    1: "Air quality is satisfactory, and air pollution poses little or no risk.",
    2: "Air quality is acceptable. However, there may be a risk for some people.",
    3: (
        "Members of sensitive groups may experience health effects. "
        "The general public is less likely to be affected."
    ),
    4: (
        "Some members of the general public may experience health effects; "
        "members of sensitive groups may experience more serious health effects."
    ),
    5: "Health alert: The risk of health effects is increased for everyone.",
    6: "Health warning of emergency conditions: everyone is more likely to be affected.",
}

# (upper bound inclusive, label)
_UV_BANDS: tuple[tuple[float, str], ...] = (
    (2, "Low"),
    (5, "Moderate"),
    (7, "High"),
    (10, "Very High"),
)

# (upper bound exclusive in mph, description); scale is the index.
_BEAUFORT_BANDS: tuple[tuple[float, str], ...] = (
    (1, "Calm"),
    (4, "Light air"),
    (8, "Light breeze"),
    (13, "Gentle breeze"),
    (18, "Moderate breeze"),
    (25, "Fresh breeze"),
    (31, "Strong breeze"),
    (39, "Near gale"),
    (47, "Gale"),
    (55, "Strong gale"),
    (64, "Storm"),
    (73, "Violent storm"),
)
_BEAUFORT_TOP = "Hurricane"

Pollutant = Literal["pm2_5", "pm10", "co", "no2", "so2", "o3"]


def _as_epa_index(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def classify_aqi(epa_index: object) -> Classification:
    """Map a US EPA index (1-6) to a label; anything else is Unknown."""
    index = _as_epa_index(epa_index)
    if index is None or index not in _AQI_LABELS:
        return UNKNOWN
    return Classification(label=_AQI_LABELS[index], severity_tier=index)


def describe_aqi(epa_index: object) -> str:
    """Health guidance sentence for an EPA index."""
    index = _as_epa_index(epa_index)
    if index is None or index not in _AQI_DESCRIPTIONS:
        return "Air quality data is unavailable."
    return _AQI_DESCRIPTIONS[index]


def classify_uv(uv_index: float) -> Classification:
    """Band a UV index; values above 10 (and NaN) are Extreme."""
    for tier, (upper, label) in enumerate(_UV_BANDS, start=1):
        if uv_index <= upper:
            return Classification(label=label, severity_tier=tier)
    return Classification(label="Extreme", severity_tier=len(_UV_BANDS) + 1)


def classify_beaufort(wind_kph: float) -> BeaufortReading:
    """Convert km/h to mph and look up the 13-band Beaufort scale."""
    wind_mph = wind_kph * KPH_TO_MPH
    if math.isnan(wind_mph):
        return BeaufortReading(scale=0, description=_BEAUFORT_BANDS[0][1])
    for scale, (upper, description) in enumerate(_BEAUFORT_BANDS):
        if wind_mph < upper:
            return BeaufortReading(scale=scale, description=description)
    return BeaufortReading(scale=len(_BEAUFORT_BANDS), description=_BEAUFORT_TOP)


def classify_pollutant(value: float, pollutant: Pollutant | str) -> Classification:
    """Coarse concentration bands for particulate matter (ug/m3).

    Only PM2.5 and PM10 have bands; other pollutants report Good.
    """
    if pollutant == "pm2_5":
        if value <= 12:
            return Classification(label="Good", severity_tier=1)
        if value <= 35:
            return Classification(label="Moderate", severity_tier=2)
        if value <= 55:
            return Classification(label="Unhealthy for sensitive groups", severity_tier=3)
        return Classification(label="Unhealthy", severity_tier=4)
    if pollutant == "pm10":
        if value <= 54:
            return Classification(label="Good", severity_tier=1)
        if value <= 154:
            return Classification(label="Moderate", severity_tier=2)
        return Classification(label="Unhealthy", severity_tier=4)
    return Classification(label="Good", severity_tier=1)


class WeatherWarning(BaseModel):
    """Headline hazard for current conditions."""

    model_config = ConfigDict(frozen=True)

    kind: str
    severity: Literal["high", "medium", "low"]
    message: str


CYCLONE_WIND_KPH = 118
HIGH_WIND_KPH = 60
BLIZZARD_WIND_KPH = 50
HEAVY_RAIN_MM = 50
LOW_VISIBILITY_KM = 1


def classify_warning(
    condition_text: str,
    wind_kph: float,
    precip_mm: float = 0.0,
    vis_km: float | None = None,
) -> WeatherWarning | None:
    """Pick the single most severe warning, checked in priority order.

    Returns None when nothing is hazardous.
    """
    condition = (condition_text or "").lower()

    if wind_kph > CYCLONE_WIND_KPH:
        return WeatherWarning(
            kind="Cyclonic Storm",
            severity="high",
            message=(
                f"Severe cyclonic conditions detected with wind speeds of {round(wind_kph)} km/h. "
                "Stay indoors and follow local emergency guidelines."
            ),
        )
    if "thunder" in condition or "storm" in condition:
        return WeatherWarning(
            kind="Thunderstorm Alert",
            severity="high",
            message=(
                "Severe thunderstorm in your area. Lightning detected. "
                "Seek shelter immediately and avoid outdoor activities."
            ),
        )
    if "heavy rain" in condition or "torrential" in condition or precip_mm > HEAVY_RAIN_MM:
        return WeatherWarning(
            kind="Heavy Rain Warning",
            severity="medium",
            message=(
                f"Heavy rainfall detected ({precip_mm:g}mm). Potential flooding in low-lying "
                "areas. Exercise caution while traveling."
            ),
        )
    if "blizzard" in condition or ("snow" in condition and wind_kph > BLIZZARD_WIND_KPH):
        return WeatherWarning(
            kind="Blizzard Warning",
            severity="high",
            message=(
                "Severe snow conditions with reduced visibility. "
                "Avoid unnecessary travel and stay warm."
            ),
        )
    if wind_kph > HIGH_WIND_KPH:
        return WeatherWarning(
            kind="High Wind Alert",
            severity="medium",
            message=(
                f"Strong winds detected at {round(wind_kph)} km/h. "
                "Secure loose objects and be cautious of falling debris."
            ),
        )
    if vis_km is not None and vis_km < LOW_VISIBILITY_KM:
        return WeatherWarning(
            kind="Low Visibility Alert",
            severity="medium",
            message=(
                f"Very poor visibility ({vis_km:g}km). "
                "Drive slowly and use fog lights if traveling."
            ),
        )
    return None
