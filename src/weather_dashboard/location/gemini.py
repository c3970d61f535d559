"""Generative last-resort geocoder backed by the Gemini text API."""

from __future__ import annotations

import json
import re
from typing import Any

from ..exceptions import LocationProviderError
from .base import LocationProvider
from .models import LocationCandidate

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

PROMPT_TEMPLATE = (
    'Find the latitude and longitude for: "{query}". '
    'Return ONLY a JSON array with this format: '
    '[{{"name":"City Name","country":"Country","lat":number,"lon":number}}]. '
    "If multiple matches, return up to {limit}. If no match, return empty array."
)


def extract_json_array(text: str) -> list[Any] | None:
    """Pull the outermost ``[...]`` span out of model prose and parse it.

    Returns None when no span exists, it is not valid JSON, or it does not
    decode to a list.
    """
    match = _JSON_ARRAY_RE.search(text)
    if match is None:
        return None
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        return None
    if not isinstance(parsed, list):
        return None
    return parsed


class GeminiLocationProvider(LocationProvider):
    """Asks the model for place guesses; lower trust, only used when others are empty."""

    name = "gemini"
    priority = 2

    async def fetch_candidates(self, query: str) -> list[LocationCandidate]:
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise LocationProviderError("gemini skipped: GEMINI_API_KEY is not set.", category="config")

        base_url = str(self.settings.gemini_base_url).rstrip("/")
        url = f"{base_url}/models/{self.settings.gemini_model}:generateContent"
        limit = self.settings.gemini_max_results
        payload = await self._request_json(
            "POST",
            url,
            context="completion",
            params={"key": api_key},
            json_body={
                "contents": [
                    {"parts": [{"text": PROMPT_TEMPLATE.format(query=query, limit=limit)}]}
                ]
            },
        )

        text = self._response_text(payload)
        records = extract_json_array(text)
        if records is None:
            raise LocationProviderError(
                "gemini response did not contain a parseable JSON array.",
                category="payload",
            )

        candidates: list[LocationCandidate] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                continue
            candidate = self._normalize(index, record)
            if candidate is not None:
                candidates.append(candidate)
            if len(candidates) >= limit:
                break
        return candidates

    @staticmethod
    def _response_text(payload: Any) -> str:
        """Read ``candidates[0].content.parts[0].text``; empty string if absent."""
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return ""
        return text if isinstance(text, str) else ""

    def _normalize(self, index: int, record: dict[str, Any]) -> LocationCandidate | None:
        name = record.get("name")
        country = record.get("country")
        url = None
        if isinstance(name, str) and isinstance(country, str):
            url = self._slug(name, country)
        return self._build_candidate(
            index,
            name=name,
            region="",
            country=country,
            latitude=record.get("lat"),
            longitude=record.get("lon"),
            url=url,
        )
