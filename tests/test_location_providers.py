"""Tests for place search adapters: normalization, key rotation and fail-soft behavior."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from weather_dashboard.location.gemini import GeminiLocationProvider, extract_json_array
from weather_dashboard.location.open_meteo import OpenMeteoGeocodingProvider
from weather_dashboard.location.weatherapi import WeatherAPISearchProvider

Handler = Callable[[httpx.Request], httpx.Response]


def _make_settings(**overrides: Any) -> Any:
    defaults = {
        "http_user_agent": "weather-dashboard-tests/0.1",
        "provider_timeout_seconds": 5.0,
        "weatherapi_base_url": "https://api.weatherapi.test/v1",
        "weatherapi_key_list": ["key-one"],
        "open_meteo_geocoding_url": "https://geocoding.open-meteo.test/",
        "open_meteo_result_count": 10,
        "gemini_api_key": "gemini-test-key",
        "gemini_base_url": "https://gemini.test/v1beta",
        "gemini_model": "gemini-test",
        "gemini_max_results": 5,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _client(handler: Handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _search(provider_cls: type, handler: Handler, query: str, **settings_overrides: Any) -> Any:
    async def _run() -> Any:
        async with _client(handler) as client:
            provider = provider_cls(
                _make_settings(**settings_overrides),
                logger=logging.getLogger("test_location_providers"),
                client=client,
            )
            return await provider.search(query)

    return asyncio.run(_run())


# ---------------------------------------------------------------------------
# WeatherAPI
# ---------------------------------------------------------------------------


def test_weatherapi_normalizes_search_records() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "id": 2801268,
                    "name": "London",
                    "region": "City of London, Greater London",
                    "country": "United Kingdom",
                    "lat": 51.52,
                    "lon": -0.11,
                    "url": "london-city-of-london-greater-london-united-kingdom",
                },
                {"name": "Londrina", "region": None, "country": "Brazil", "lat": -23.3, "lon": -51.15},
            ],
        )

    results = _search(WeatherAPISearchProvider, handler, "Lon")

    assert [r.name for r in results] == ["London", "Londrina"]
    assert results[0].provider == "weatherapi"
    assert results[0].source_id == "weatherapi:0"
    assert results[0].url == "london-city-of-london-greater-london-united-kingdom"
    assert results[1].region == ""
    assert seen[0].url.path == "/v1/search.json"
    assert seen[0].url.params["q"] == "Lon"
    assert seen[0].url.params["key"] == "key-one"


def test_weatherapi_drops_invalid_records_only() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {"name": "", "country": "Nowhere", "lat": 1, "lon": 1},
                {"name": "Bad Lat", "country": "X", "lat": 123, "lon": 1},
                "not-a-record",
                {"name": "Oslo", "region": "Oslo", "country": "Norway", "lat": 59.91, "lon": 10.75},
            ],
        )

    results = _search(WeatherAPISearchProvider, handler, "Oslo")
    assert [r.name for r in results] == ["Oslo"]


def test_weatherapi_rotates_keys_on_quota_error() -> None:
    used_keys: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.params["key"]
        used_keys.append(key)
        if key == "key-one":
            return httpx.Response(403, json={"error": {"code": 2007, "message": "quota exceeded"}})
        return httpx.Response(
            200, json=[{"name": "Paris", "region": "Ile-de-France", "country": "France",
                        "lat": 48.87, "lon": 2.33}]
        )

    results = _search(
        WeatherAPISearchProvider, handler, "Paris", weatherapi_key_list=["key-one", "key-two"]
    )
    assert used_keys == ["key-one", "key-two"]
    assert [r.name for r in results] == ["Paris"]


def test_weatherapi_without_keys_returns_empty_without_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    assert _search(WeatherAPISearchProvider, handler, "Paris", weatherapi_key_list=[]) == []
    assert calls == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"error": "unexpected object"}),
    ],
)
def test_weatherapi_failures_resolve_to_empty(
    response: httpx.Response, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="test_location_providers"):
        assert _search(WeatherAPISearchProvider, lambda request: response, "Lon") == []
    assert any("weatherapi" in record.getMessage() for record in caplog.records)


def test_weatherapi_network_error_is_logged_without_key(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"connection refused for {request.url}", request=request)

    with caplog.at_level(logging.WARNING, logger="test_location_providers"):
        assert _search(WeatherAPISearchProvider, handler, "Lon") == []
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "ConnectError" in messages
    assert "key-one" not in messages


# ---------------------------------------------------------------------------
# Open-Meteo
# ---------------------------------------------------------------------------


def test_open_meteo_maps_admin_fields_and_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "results": [
                    {"name": "Springfield", "admin1": "Illinois", "admin2": "Sangamon",
                     "country": "United States", "latitude": 39.80172, "longitude": -89.64371},
                    {"name": "Springfield", "admin2": "Greene", "country": "United States",
                     "latitude": 37.21533, "longitude": -93.29824},
                    {"name": "Springfield", "country": "Australia",
                     "latitude": -33.5, "longitude": 150.1},
                ]
            },
        )

    results = _search(OpenMeteoGeocodingProvider, handler, "Springfield")

    assert [r.region for r in results] == ["Illinois", "Greene", ""]
    assert results[0].latitude == pytest.approx(39.80172)
    assert results[0].url == "springfield-united-states"
    assert results[2].provider == "open_meteo"
    params = seen[0].url.params
    assert seen[0].url.path == "/v1/search"
    assert params["name"] == "Springfield"
    assert params["count"] == "10"
    assert params["language"] == "en"
    assert params["format"] == "json"


def test_open_meteo_missing_results_key_means_no_matches(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="test_location_providers"):
        results = _search(
            OpenMeteoGeocodingProvider,
            lambda request: httpx.Response(200, json={"generationtime_ms": 0.4}),
            "xzqplk123",
        )
    assert results == []
    assert caplog.records == []


def test_open_meteo_http_error_resolves_to_empty() -> None:
    results = _search(
        OpenMeteoGeocodingProvider,
        lambda request: httpx.Response(400, json={"error": True, "reason": "bad"}),
        "x",
    )
    assert results == []


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------


def _gemini_response(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_extract_json_array_from_prose() -> None:
    text = 'Sure! Here you go:\n```json\n[{"name": "Ushuaia", "lat": -54.8}]\n```\nHope that helps.'
    assert extract_json_array(text) == [{"name": "Ushuaia", "lat": -54.8}]


@pytest.mark.parametrize(
    "text",
    [
        "I could not find that place.",
        "[not valid json]",
        "[{\"name\": \"Half\"",
        "",
    ],
)
def test_extract_json_array_rejects_unusable_text(text: str) -> None:
    assert extract_json_array(text) is None


def test_gemini_sends_instruction_and_normalizes_guesses() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _gemini_response(
            'Here are the matches: [{"name":"Tristan da Cunha","country":"Saint Helena",'
            '"lat":-37.07,"lon":-12.31}]'
        )

    results = _search(GeminiLocationProvider, handler, "tristan")

    assert len(results) == 1
    assert results[0].name == "Tristan da Cunha"
    assert results[0].region == ""
    assert results[0].provider == "gemini"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1beta/models/gemini-test:generateContent"
    assert request.url.params["key"] == "gemini-test-key"
    body = json.loads(request.content)
    prompt = body["contents"][0]["parts"][0]["text"]
    assert '"tristan"' in prompt
    assert "up to 5" in prompt


def test_gemini_caps_results() -> None:
    guesses = [
        {"name": f"Place {i}", "country": "Somewhere", "lat": i, "lon": i} for i in range(1, 9)
    ]
    results = _search(
        GeminiLocationProvider,
        lambda request: _gemini_response(json.dumps(guesses)),
        "place",
        gemini_max_results=3,
    )
    assert [r.name for r in results] == ["Place 1", "Place 2", "Place 3"]


@pytest.mark.parametrize(
    "response",
    [
        _gemini_response("No idea, sorry."),
        _gemini_response("[{'name': 'single quotes'}]"),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(429, json={"error": {"status": "RESOURCE_EXHAUSTED"}}),
    ],
)
def test_gemini_unusable_responses_discard_whole_call(response: httpx.Response) -> None:
    assert _search(GeminiLocationProvider, lambda request: response, "atlantis") == []


def test_gemini_without_key_returns_empty() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return _gemini_response("[]")

    assert _search(GeminiLocationProvider, handler, "atlantis", gemini_api_key=None) == []
    assert calls == []
