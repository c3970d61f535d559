"""Tests for the authenticated encryption and signing helpers."""

from __future__ import annotations

import base64

import pytest

from weather_dashboard.crypto import (
    KEY_SIZE,
    NONCE_SIZE,
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
from weather_dashboard.exceptions import CryptoError


def test_encrypt_then_decrypt_round_trip() -> None:
    key = generate_key()
    token = encrypt_text("lat=51.5,lon=-0.12 ☂", key)
    assert decrypt_text(token, key) == "lat=51.5,lon=-0.12 ☂"


def test_nonce_is_random_per_message() -> None:
    key = generate_key()
    first = base64.b64decode(encrypt_text("same", key))
    second = base64.b64decode(encrypt_text("same", key))
    assert first[:NONCE_SIZE] != second[:NONCE_SIZE]
    assert first != second


def test_decrypt_with_wrong_key_returns_none() -> None:
    token = encrypt_text("secret", generate_key())
    assert decrypt_text(token, generate_key()) is None


def test_decrypt_tampered_token_returns_none() -> None:
    key = generate_key()
    raw = bytearray(base64.b64decode(encrypt_text("secret", key)))
    raw[-1] ^= 0x01
    assert decrypt_text(base64.b64encode(bytes(raw)).decode(), key) is None


@pytest.mark.parametrize("token", ["not base64!!", "", base64.b64encode(b"short").decode()])
def test_decrypt_garbage_returns_none(token: str) -> None:
    assert decrypt_text(token, generate_key()) is None


def test_encrypt_rejects_wrong_key_size() -> None:
    with pytest.raises(CryptoError):
        encrypt_text("x", b"too-short")


def test_key_encoding_round_trip_and_validation() -> None:
    key = generate_key()
    assert len(key) == KEY_SIZE
    assert decode_key(encode_key(key)) == key
    with pytest.raises(CryptoError, match="32 bytes"):
        decode_key(base64.b64encode(b"abc").decode())
    with pytest.raises(CryptoError, match="base64"):
        decode_key("%%%")


def test_signatures_verify_and_reject_tampering() -> None:
    private_key, public_key = generate_signing_keypair()
    signature = sign_text("forecast:london", private_key)

    assert verify_signature("forecast:london", signature, public_key)
    assert not verify_signature("forecast:paris", signature, public_key)
    assert not verify_signature("forecast:london", "bm90LWEtc2lnbmF0dXJl", public_key)
    _, other_public = generate_signing_keypair()
    assert not verify_signature("forecast:london", signature, other_public)


def test_signing_keys_survive_base64_transport() -> None:
    private_key, public_key = generate_signing_keypair()
    secret_text = encode_private_key(private_key)
    public_text = encode_public_key(public_key)

    signature = sign_text("snapshot", decode_private_key(secret_text))
    assert verify_signature("snapshot", signature, decode_public_key(public_text))
    assert len(base64.b64decode(secret_text)) == 32


@pytest.mark.parametrize("text", ["%%%", base64.b64encode(b"x" * 31).decode()])
def test_malformed_signing_keys_raise(text: str) -> None:
    with pytest.raises(CryptoError):
        decode_private_key(text)
    with pytest.raises(CryptoError):
        decode_public_key(text)
