"""Provider-agnostic place search interface with a fail-soft contract."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..exceptions import LocationProviderError
from ..redaction import sanitize_text
from .models import LocationCandidate


class LocationProvider(ABC):
    """Base contract for geocoding providers used by the resolver.

    Subclasses implement `fetch_candidates`, which may raise. Callers use
    `search`, which never raises for upstream failures: it logs a warning and
    returns an empty list instead.
    """

    name: str = "provider"
    priority: int = 100

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger(f"weather_dashboard.location.{self.name}")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds or settings.provider_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.http_user_agent,
            },
        )

    async def __aenter__(self) -> LocationProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    async def search(self, query: str) -> list[LocationCandidate]:
        """Return normalized candidates, or [] on any provider failure."""
        try:
            candidates = await self.fetch_candidates(query)
        except LocationProviderError as exc:
            self.logger.warning("%s search failed: %s", self.name, exc)
            return []
        except httpx.HTTPError as exc:
            self.logger.warning(
                "%s search request failed (%s): %s",
                self.name, type(exc).__name__, sanitize_text(str(exc)),
            )
            return []
        except Exception as exc:  # noqa: BLE001 - search must never raise
            self.logger.warning(
                "%s search failed unexpectedly (%s): %s",
                self.name, type(exc).__name__, exc,
                exc_info=True,
            )
            return []
        self.logger.debug("%s returned %d candidates", self.name, len(candidates))
        return candidates

    @abstractmethod
    async def fetch_candidates(self, query: str) -> list[LocationCandidate]:
        """Query the upstream service and normalize its records."""

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        context: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, url, params=params, json=json_body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise LocationProviderError(
                f"{self.name} {context} failed with status {status}: "
                f"{sanitize_text(exc.response.text[:300])}",
                category="http",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise LocationProviderError(
                f"{self.name} {context} request failed ({type(exc).__name__}): "
                f"{sanitize_text(str(exc))}",
                category="network",
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise LocationProviderError(
                f"{self.name} {context} returned non-JSON response.",
                category="payload",
            ) from exc

    def _build_candidate(self, index: int, **fields: Any) -> LocationCandidate | None:
        """Validate one normalized record; invalid records are dropped, not fatal."""
        try:
            return LocationCandidate(source_id=f"{self.name}:{index}", provider=self.name, **fields)
        except ValidationError as exc:
            self.logger.debug(
                "%s dropped invalid record %d: %s", self.name, index, exc.errors()[:1]
            )
            return None

    @staticmethod
    def _slug(*parts: str) -> str:
        return "-".join("-".join(part.lower().split()) for part in parts if part)
