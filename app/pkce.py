"""PKCE helpers for the OAuth2 authorization-code flow (RFC 7636, S256)."""

from __future__ import annotations

import base64
import hashlib
import secrets

VERIFIER_BYTES = 32


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_verifier() -> str:
    """Return a fresh code_verifier: 32 random bytes, base64url without padding."""
    return _b64url(secrets.token_bytes(VERIFIER_BYTES))


def derive_challenge(verifier: str) -> str:
    """Return the S256 code_challenge for ``verifier``."""
    return _b64url(hashlib.sha256(verifier.encode("ascii")).digest())


def generate_state() -> str:
    return secrets.token_urlsafe(16)
