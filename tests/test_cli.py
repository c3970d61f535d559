"""Offline smoke tests for the search and forecast CLIs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from weather_dashboard import forecast_cli, search_cli
from weather_dashboard.exceptions import WeatherProviderError
from weather_dashboard.location.models import AggregatedResult, LocationCandidate
from weather_dashboard.weather.models import WeatherSnapshot

FIXTURE = Path(__file__).parent / "fixtures" / "weatherapi_forecast_mumbai.json"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: Any, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("WEATHERAPI_KEYS", "test-key")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("FORECAST_DAYS", raising=False)


def _candidate(name: str, lat: float, lon: float, provider: str = "open_meteo") -> LocationCandidate:
    return LocationCandidate(
        name=name,
        region="Illinois",
        country="United States",
        latitude=lat,
        longitude=lon,
        source_id=f"{provider}:0",
        provider=provider,
    )


class FakeResolver:
    def __init__(self, result: AggregatedResult) -> None:
        self.result = result
        self.queries: list[str] = []
        self.closed = False

    async def __aenter__(self) -> FakeResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True

    async def resolve_locations(self, query: str) -> AggregatedResult:
        self.queries.append(query)
        return self.result


class FakeForecastProvider:
    error: WeatherProviderError | None = None
    calls: list[tuple[str, int | None]] = []

    def __init__(self, settings: Any, logger: Any = None) -> None:
        self.settings = settings

    async def __aenter__(self) -> FakeForecastProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def fetch_forecast(self, query: str, *, days: int | None = None) -> WeatherSnapshot:
        type(self).calls.append((query, days))
        if self.error is not None:
            raise self.error
        return WeatherSnapshot.from_weatherapi(json.loads(FIXTURE.read_text(encoding="utf-8")))


def test_search_cli_prints_results(monkeypatch: Any, capsys: Any) -> None:
    result = AggregatedResult(
        query="Springfield",
        results=(
            _candidate("Springfield", 39.8017, -89.6437),
            _candidate("Springfield", 37.2153, -93.2982, provider="weatherapi"),
        ),
    )
    resolver = FakeResolver(result)
    monkeypatch.setattr(search_cli, "build_resolver", lambda settings, logger=None: resolver)

    exit_code = search_cli.main(["Springfield", "--max-print", "1"])

    assert exit_code == 0
    assert resolver.queries == ["Springfield"]
    assert resolver.closed is True
    out = capsys.readouterr().out
    assert "results=2" in out
    assert "Top match: Springfield, Illinois, United States" in out
    assert "Place Matches" in out
    assert "37.2153" not in out


def test_search_cli_reports_no_matches(monkeypatch: Any, capsys: Any) -> None:
    resolver = FakeResolver(AggregatedResult(query="xzqplk123", used_fallback=True))
    monkeypatch.setattr(search_cli, "build_resolver", lambda settings, logger=None: resolver)

    assert search_cli.main(["xzqplk123"]) == 0
    out = capsys.readouterr().out
    assert "fallback=yes" in out
    assert "No matching places found." in out


def test_search_cli_rejects_bad_max_print(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        search_cli,
        "build_resolver",
        lambda settings, logger=None: pytest.fail("resolver must not be built"),
    )
    assert search_cli.main(["Paris", "--max-print", "0"]) == 2


def test_search_cli_config_error_exit_code(monkeypatch: Any) -> None:
    monkeypatch.setenv("SEARCH_MAX_RESULTS", "-1")
    assert search_cli.main(["Paris"]) == 2


def test_forecast_cli_prints_snapshot(monkeypatch: Any, capsys: Any) -> None:
    monkeypatch.setattr(FakeForecastProvider, "calls", [])
    monkeypatch.setattr(FakeForecastProvider, "error", None)
    monkeypatch.setattr(forecast_cli, "WeatherAPIForecastProvider", FakeForecastProvider)

    assert forecast_cli.main(["Mumbai", "--days", "2"]) == 0

    assert FakeForecastProvider.calls == [("Mumbai", 2)]
    out = capsys.readouterr().out
    assert "Mumbai, Maharashtra, India" in out
    assert "Tue, Jan 6 • 4:35 PM" in out
    assert "Beaufort 4 Moderate breeze" in out
    assert "UV 6.1 (High)" in out
    assert "Air quality: Unhealthy." in out
    assert "Daily Forecast" in out
    assert "WARNING" not in out


def test_forecast_cli_provider_error_exit_code(monkeypatch: Any) -> None:
    monkeypatch.setattr(FakeForecastProvider, "calls", [])
    monkeypatch.setattr(
        FakeForecastProvider,
        "error",
        WeatherProviderError("WeatherAPI forecast fetch failed with status 400", category="http"),
    )
    monkeypatch.setattr(forecast_cli, "WeatherAPIForecastProvider", FakeForecastProvider)

    assert forecast_cli.main(["Atlantis"]) == 4


def test_forecast_cli_config_error_exit_code(monkeypatch: Any) -> None:
    monkeypatch.setenv("FORECAST_DAYS", "30")
    monkeypatch.setattr(
        forecast_cli,
        "WeatherAPIForecastProvider",
        lambda *args, **kwargs: pytest.fail("provider must not be built"),
    )
    assert forecast_cli.main(["Mumbai"]) == 2
