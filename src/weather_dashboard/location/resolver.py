"""Fan-out place search across providers with proximity deduplication."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from ..config import Settings
from ..geo import DEFAULT_THRESHOLD_DEG, is_same_location, is_within_radius
from .base import LocationProvider
from .gemini import GeminiLocationProvider
from .models import AggregatedResult, LocationCandidate
from .open_meteo import OpenMeteoGeocodingProvider
from .weatherapi import WeatherAPISearchProvider


def dedupe_candidates(
    candidates: Iterable[LocationCandidate],
    *,
    threshold_deg: float = DEFAULT_THRESHOLD_DEG,
    radius_km: float | None = None,
) -> list[LocationCandidate]:
    """Keep the first occurrence of each place, in input order.

    A later candidate is dropped when it is near any already kept one: within
    ``radius_km`` great-circle distance when set, otherwise within the
    rectangular ``threshold_deg`` box.
    """
    kept: list[LocationCandidate] = []
    for candidate in candidates:
        if radius_km is not None:
            duplicate = any(is_within_radius(candidate, other, radius_km) for other in kept)
        else:
            duplicate = any(is_same_location(candidate, other, threshold_deg) for other in kept)
        if not duplicate:
            kept.append(candidate)
    return kept


def drop_uncorroborated_null_island(
    candidates: Sequence[LocationCandidate],
) -> list[LocationCandidate]:
    """Remove (0, 0) candidates unless two or more providers agree on them."""
    null_providers = {c.provider for c in candidates if c.is_null_island}
    if len(null_providers) >= 2:
        return list(candidates)
    return [c for c in candidates if not c.is_null_island]


class LocationResolver:
    """Resolve a free-text place query into an `AggregatedResult`.

    Structured providers run concurrently and are always awaited together
    (settle-all). The generative fallback only runs, afterwards, when every
    structured provider came back empty. Callers are expected to debounce
    keystrokes by 250-500 ms before calling `resolve_locations`.
    """

    def __init__(
        self,
        settings: Settings,
        structured_providers: Sequence[LocationProvider],
        fallback_provider: LocationProvider | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.structured_providers = sorted(structured_providers, key=lambda p: p.priority)
        self.fallback_provider = fallback_provider
        self.logger = logger or logging.getLogger("weather_dashboard.location.resolver")

    async def __aenter__(self) -> LocationResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        providers = list(self.structured_providers)
        if self.fallback_provider is not None:
            providers.append(self.fallback_provider)
        for provider in providers:
            await provider.aclose()

    async def resolve_locations(self, query: str) -> AggregatedResult:
        """Search all providers; never raises for provider or input problems."""
        cleaned = (query or "").strip()
        if len(cleaned) < self.settings.search_min_query_length or not cleaned:
            self.logger.debug("Query %r below minimum length; skipping search", cleaned)
            return AggregatedResult(query=cleaned)

        batches = await asyncio.gather(
            *(self._search_with_timeout(provider, cleaned) for provider in self.structured_providers)
        )
        merged = [candidate for batch in batches for candidate in batch]
        if self.settings.search_drop_null_island:
            merged = drop_uncorroborated_null_island(merged)
        self.logger.info(
            "Search %r structured results: %s",
            cleaned,
            ", ".join(
                f"{provider.name}={len(batch)}"
                for provider, batch in zip(self.structured_providers, batches, strict=True)
            ) or "none configured",
        )

        used_fallback = False
        if not merged and self.fallback_provider is not None:
            used_fallback = True
            merged = await self._search_with_timeout(self.fallback_provider, cleaned)
            if self.settings.search_drop_null_island:
                merged = drop_uncorroborated_null_island(merged)
            self.logger.info(
                "Search %r fallback %s returned %d results",
                cleaned, self.fallback_provider.name, len(merged),
            )

        unique = dedupe_candidates(
            merged,
            threshold_deg=self.settings.search_dedup_threshold_deg,
            radius_km=self.settings.search_dedup_radius_km,
        )
        results = unique[: self.settings.search_max_results]
        self.logger.info("Search %r returning %d unique results", cleaned, len(results))
        return AggregatedResult(query=cleaned, results=tuple(results), used_fallback=used_fallback)

    async def _search_with_timeout(
        self, provider: LocationProvider, query: str
    ) -> list[LocationCandidate]:
        try:
            return await asyncio.wait_for(
                provider.search(query),
                timeout=self.settings.provider_timeout_seconds,
            )
        except TimeoutError:
            self.logger.warning(
                "%s search timed out after %.1fs",
                provider.name, self.settings.provider_timeout_seconds,
                extra={"provider": provider.name, "query": query},
            )
            return []
        except Exception as exc:  # noqa: BLE001 - a misbehaving provider contributes nothing
            self.logger.warning(
                "%s search raised %s despite fail-soft contract: %s",
                provider.name, type(exc).__name__, exc,
                extra={"provider": provider.name, "query": query},
            )
            return []


class SearchSession:
    """Latest-query-wins wrapper for interactive search boxes.

    Submitting a new query cancels the previous in-flight resolution; the
    superseded caller receives an empty result for its query.
    """

    def __init__(self, resolver: LocationResolver) -> None:
        self.resolver = resolver
        self._current: asyncio.Task[AggregatedResult] | None = None

    async def submit(self, query: str) -> AggregatedResult:
        if self._current is not None and not self._current.done():
            self._current.cancel()
        task = asyncio.create_task(self.resolver.resolve_locations(query))
        self._current = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and not _current_task_cancelling():
                return AggregatedResult(query=(query or "").strip())
            raise


def _current_task_cancelling() -> bool:
    current = asyncio.current_task()
    return current is not None and current.cancelling() > 0


def build_resolver(settings: Settings, logger: logging.Logger | None = None) -> LocationResolver:
    """Wire the configured providers in priority order.

    Providers that need credentials are only constructed when their keys are set.
    """
    def child(name: str) -> logging.Logger | None:
        return logger.getChild(name) if logger is not None else None

    structured: list[LocationProvider] = []
    if settings.weatherapi_key_list:
        structured.append(WeatherAPISearchProvider(settings, logger=child("weatherapi")))
    structured.append(OpenMeteoGeocodingProvider(settings, logger=child("open_meteo")))

    fallback: LocationProvider | None = None
    if settings.generative_fallback_enabled and settings.gemini_api_key:
        fallback = GeminiLocationProvider(settings, logger=child("gemini"))

    return LocationResolver(
        settings,
        structured_providers=structured,
        fallback_provider=fallback,
        logger=child("resolver"),
    )
