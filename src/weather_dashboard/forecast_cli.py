"""CLI: fetch a forecast snapshot and print conditions with classifications."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from .classify import (
    classify_aqi,
    classify_beaufort,
    classify_uv,
    classify_warning,
    describe_aqi,
)
from .config import Settings, load_settings
from .exceptions import ConfigError, WeatherProviderError
from .log_setup import setup_logger
from .timefmt import format_local_datetime, format_relative_date
from .weather.models import WeatherSnapshot
from .weather.weatherapi import WeatherAPIForecastProvider


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse forecast CLI arguments."""
    parser = argparse.ArgumentParser(description="Fetch and summarize a weather forecast.")
    parser.add_argument("city", help="Place name or 'lat,lon'.")
    parser.add_argument("--days", type=int, default=None, help="Forecast days (1-14).")
    return parser.parse_args(argv)


def _print_snapshot(console: Console, snapshot: WeatherSnapshot) -> None:
    location = snapshot.location
    current = snapshot.current
    place = ", ".join(part for part in [location.name, location.region, location.country] if part)
    local_time = format_local_datetime(location.localtime) if location.localtime else "-"
    console.print(f"{place} | {local_time}")
    warning = classify_warning(
        current.condition.text, current.wind_kph, current.precip_mm, current.vis_km
    )
    if warning is not None:
        console.print(f"WARNING ({warning.severity}): {warning.kind}. {warning.message}")
    console.print(
        f"{current.temp_c:g}°C {current.condition.text or '-'} | humidity={current.humidity} "
        f"pressure={current.pressure_mb}mb"
    )

    beaufort = classify_beaufort(current.wind_kph)
    console.print(
        f"Wind {current.wind_kph:g} km/h {current.wind_dir or ''} "
        f"(Beaufort {beaufort.scale} {beaufort.description})"
    )
    if current.uv is not None:
        console.print(f"UV {current.uv:g} ({classify_uv(current.uv).label})")
    if current.air_quality is not None:
        aqi = classify_aqi(current.air_quality.us_epa_index)
        console.print(f"Air quality: {aqi.label}. {describe_aqi(current.air_quality.us_epa_index)}")

    if not snapshot.forecast_days:
        console.print("No forecast days returned.")
        return

    table = Table(title="Daily Forecast")
    table.add_column("Day")
    table.add_column("Min/Max °C")
    table.add_column("Condition", overflow="fold")
    table.add_column("Rain %")
    table.add_column("Sunrise")
    table.add_column("Sunset")
    for forecast_day in snapshot.forecast_days:
        rain = forecast_day.day.daily_chance_of_rain
        table.add_row(
            format_relative_date(forecast_day.date),
            f"{forecast_day.day.mintemp_c:g} / {forecast_day.day.maxtemp_c:g}",
            forecast_day.day.condition.text or "-",
            f"{rain:g}" if rain is not None else "-",
            forecast_day.astro.sunrise or "-",
            forecast_day.astro.sunset or "-",
        )
    console.print(table)


async def _fetch(
    settings: Settings, city: str, days: int | None, logger: logging.Logger
) -> WeatherSnapshot:
    async with WeatherAPIForecastProvider(settings, logger=logger.getChild("forecast")) as provider:
        return await provider.fetch_forecast(city, days=days)


def main(argv: list[str] | None = None) -> int:
    """Run a single forecast fetch."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    setup_logger(level=settings.log_level)

    try:
        snapshot = asyncio.run(_fetch(settings, args.city, args.days, logger))
    except WeatherProviderError as exc:
        logger.error("Forecast fetch failure: %s", exc)
        return 4

    _print_snapshot(console, snapshot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
