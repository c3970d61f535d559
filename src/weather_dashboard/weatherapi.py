"""Shared request helper for WeatherAPI.com endpoints with key rotation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from .exceptions import ProviderError
from .redaction import sanitize_text

# Auth and quota failures are specific to one key; the next key may succeed.
ROTATE_ON_STATUS = frozenset({401, 403, 429})


async def request_with_key_rotation(
    client: httpx.AsyncClient,
    url: str,
    *,
    keys: Sequence[str],
    params: dict[str, Any],
    context: str,
    logger: logging.Logger,
    error_cls: type[ProviderError] = ProviderError,
) -> Any:
    """GET ``url`` trying each key in order until one is accepted.

    Keys are tried in configuration order on every call; no rotation index
    survives between calls.
    """
    if not keys:
        raise error_cls(f"WeatherAPI {context} skipped: no API keys configured.", category="config")

    for position, key in enumerate(keys, start=1):
        try:
            response = await client.get(url, params={**params, "key": key})
        except httpx.HTTPError as exc:
            raise error_cls(
                f"WeatherAPI {context} request failed ({type(exc).__name__}): "
                f"{sanitize_text(str(exc))}",
                category="network",
            ) from exc

        status = response.status_code
        if status in ROTATE_ON_STATUS and position < len(keys):
            logger.warning(
                "WeatherAPI %s rejected key %d/%d (HTTP %d); rotating",
                context, position, len(keys), status,
            )
            continue
        if response.is_error:
            raise error_cls(
                f"WeatherAPI {context} failed with status {status}: "
                f"{sanitize_text(response.text[:300])}",
                category="auth" if status in ROTATE_ON_STATUS else "http",
                status_code=status,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise error_cls(
                f"WeatherAPI {context} returned non-JSON response.",
                category="payload",
                status_code=status,
            ) from exc

    raise error_cls(f"WeatherAPI {context} exhausted all API keys.", category="auth")
