"""JSON HTTP endpoints for place search, forecast fetch and encryption."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import Settings, load_settings
from .crypto import (
    decode_key,
    decode_private_key,
    decode_public_key,
    decrypt_text,
    encode_key,
    encode_private_key,
    encode_public_key,
    encrypt_text,
    generate_key,
    generate_signing_keypair,
    sign_text,
    verify_signature,
)
from .exceptions import CryptoError, WeatherProviderError
from .location.models import SearchRequest, SearchResponse
from .location.resolver import LocationResolver, build_resolver
from .log_setup import setup_logger
from .weather.base import WeatherProvider
from .weather.weatherapi import WeatherAPIForecastProvider


async def _json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


_CRYPTO_OPERATIONS = ("encrypt", "decrypt", "sign", "verify", "generateKey", "generateKeyPair")


def _text_fields(body: dict[str, Any], *names: str) -> list[str] | None:
    """Return the named fields when all are non-empty strings, else None."""
    values = [body.get(name) for name in names]
    if all(isinstance(value, str) and value for value in values):
        return values  # type: ignore[return-value]
    return None


def _required(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail=message)


def _run_crypto_operation(operation: str, body: dict[str, Any]) -> dict[str, Any]:
    """Dispatch one /encrypt-data operation; malformed key material raises CryptoError."""
    if operation == "generateKey":
        return {"key": encode_key(generate_key())}

    if operation == "generateKeyPair":
        private_key, public_key = generate_signing_keypair()
        return {
            "publicKey": encode_public_key(public_key),
            "secretKey": encode_private_key(private_key),
        }

    if operation in {"encrypt", "decrypt"}:
        fields = _text_fields(body, "data", "key")
        if fields is None:
            raise _required(f"Data and key are required for {operation}ion")
        data, raw_key = fields
        key = decode_key(raw_key)
        if operation == "encrypt":
            return {"encryptedData": encrypt_text(data, key)}
        decrypted = decrypt_text(data, key)
        if decrypted is None:
            raise _required("Decryption failed - invalid key or corrupted data")
        return {"decryptedData": decrypted}

    if operation == "sign":
        fields = _text_fields(body, "message", "key")
        if fields is None:
            raise _required("Message and secret key are required for signing")
        message, raw_key = fields
        return {"signature": sign_text(message, decode_private_key(raw_key))}

    fields = _text_fields(body, "message", "signature", "publicKey")
    if fields is None:
        raise _required("Message, signature, and public key are required for verification")
    message, signature, raw_public_key = fields
    return {"valid": verify_signature(message, signature, decode_public_key(raw_public_key))}


def create_app(
    settings: Settings | None = None,
    *,
    resolver: LocationResolver | None = None,
    forecast_provider: WeatherProvider | None = None,
    logger: logging.Logger | None = None,
) -> FastAPI:
    """Build the app; collaborators default to ones wired from settings."""
    log = logger or setup_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        resolved_settings = settings or load_settings()
        if logger is None:
            setup_logger(level=resolved_settings.log_level)
        log.info("API startup: %s", resolved_settings.safe_summary())
        app.state.resolver = resolver or build_resolver(resolved_settings, logger=log)
        app.state.forecast = forecast_provider or WeatherAPIForecastProvider(
            resolved_settings, logger=log.getChild("forecast")
        )
        try:
            yield
        finally:
            await app.state.resolver.aclose()
            await app.state.forecast.aclose()

    app = FastAPI(title="Weather Dashboard Core", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.post("/city-search")
    async def city_search(request: Request) -> dict[str, Any]:
        # Always 200: callers render an empty list rather than handle errors.
        try:
            search = SearchRequest.model_validate(await _json_body(request))
        except ValidationError:
            return SearchResponse().model_dump(mode="json")
        query = search.query
        if not query.strip():
            return SearchResponse().model_dump(mode="json")
        try:
            result = await request.app.state.resolver.resolve_locations(query)
        except Exception:  # noqa: BLE001 - search responds with empty results on any error
            log.exception("city-search failed for %r", query)
            return SearchResponse().model_dump(mode="json")
        return SearchResponse(results=list(result.results)).model_dump(mode="json")

    @app.post("/fetch-weather")
    async def fetch_weather(request: Request) -> dict[str, Any]:
        body = await _json_body(request)
        city = body.get("city")
        if not isinstance(city, str) or not city.strip():
            raise HTTPException(status_code=400, detail="City parameter is required")
        try:
            snapshot = await request.app.state.forecast.fetch_forecast(city)
        except WeatherProviderError as exc:
            log.error("fetch-weather failed: %s", exc)
            if exc.category == "input":
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            raise HTTPException(status_code=502, detail="Forecast provider unavailable") from exc
        return snapshot.model_dump(mode="json")

    @app.post("/encrypt-data")
    async def encrypt_data(request: Request) -> dict[str, Any]:
        body = await _json_body(request)
        operation = body.get("operation")
        if operation not in _CRYPTO_OPERATIONS:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid operation. Supported: {', '.join(_CRYPTO_OPERATIONS)}",
            )
        log.info("Encryption operation requested: %s", operation)

        try:
            return _run_crypto_operation(operation, body)
        except CryptoError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    return app
