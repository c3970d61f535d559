"""Authenticated symmetric encryption and Ed25519 signing helpers.

Ciphertexts are transported as base64 of ``nonce || ciphertext+tag``
using ChaCha20-Poly1305 with a random 12-byte nonce per message. Key
storage is left to the caller.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .exceptions import CryptoError

KEY_SIZE = 32
NONCE_SIZE = 12

logger = logging.getLogger("weather_dashboard.crypto")


def generate_key() -> bytes:
    """Return a fresh random 32-byte key."""
    return ChaCha20Poly1305.generate_key()


def encode_key(key: bytes) -> str:
    return base64.b64encode(key).decode("ascii")


def decode_key(text: str) -> bytes:
    """Decode a base64 key, raising CryptoError unless it is exactly 32 bytes."""
    try:
        key = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CryptoError("Key is not valid base64.") from exc
    if len(key) != KEY_SIZE:
        raise CryptoError(f"Key must be {KEY_SIZE} bytes, got {len(key)}.")
    return key


def encrypt_text(text: str, key: bytes) -> str:
    """Encrypt UTF-8 text and return the base64 transport token."""
    if len(key) != KEY_SIZE:
        raise CryptoError(f"Key must be {KEY_SIZE} bytes, got {len(key)}.")
    nonce = os.urandom(NONCE_SIZE)
    sealed = ChaCha20Poly1305(key).encrypt(nonce, text.encode("utf-8"), None)
    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt_text(token: str, key: bytes) -> str | None:
    """Decrypt a token from `encrypt_text`; None if it cannot be opened."""
    try:
        blob = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Decryption failed: token is not valid base64")
        return None
    if len(key) != KEY_SIZE or len(blob) <= NONCE_SIZE:
        logger.warning("Decryption failed: key or token has the wrong length")
        return None

    nonce, sealed = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    try:
        plain = ChaCha20Poly1305(key).decrypt(nonce, sealed, None)
    except InvalidTag:
        logger.warning("Decryption failed: authentication tag mismatch")
        return None
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Decryption failed: plaintext is not UTF-8")
        return None


def generate_signing_keypair() -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
    private_key = Ed25519PrivateKey.generate()
    return private_key, private_key.public_key()


def sign_text(text: str, private_key: Ed25519PrivateKey) -> str:
    """Detached Ed25519 signature, base64 encoded."""
    return base64.b64encode(private_key.sign(text.encode("utf-8"))).decode("ascii")


def verify_signature(text: str, signature: str, public_key: Ed25519PublicKey) -> bool:
    try:
        raw_signature = base64.b64decode(signature, validate=True)
        public_key.verify(raw_signature, text.encode("utf-8"))
    except (binascii.Error, ValueError, InvalidSignature):
        return False
    return True


def encode_private_key(private_key: Ed25519PrivateKey) -> str:
    """Raw 32-byte Ed25519 seed, base64 encoded."""
    raw = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return base64.b64encode(raw).decode("ascii")


def encode_public_key(public_key: Ed25519PublicKey) -> str:
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return base64.b64encode(raw).decode("ascii")


def decode_private_key(text: str) -> Ed25519PrivateKey:
    """Load a key written by `encode_private_key`; CryptoError if malformed."""
    try:
        return Ed25519PrivateKey.from_private_bytes(base64.b64decode(text, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise CryptoError("Secret key must be a base64 encoded 32-byte Ed25519 key.") from exc


def decode_public_key(text: str) -> Ed25519PublicKey:
    try:
        return Ed25519PublicKey.from_public_bytes(base64.b64decode(text, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise CryptoError("Public key must be a base64 encoded 32-byte Ed25519 key.") from exc
