import base64
import hashlib
import re

from app.pkce import derive_challenge, generate_state, generate_verifier

URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def test_verifier_is_url_safe_and_long_enough() -> None:
    verifier = generate_verifier()
    assert URL_SAFE.match(verifier)
    # 32 bytes base64url-encoded without padding
    assert len(verifier) == 43


def test_verifiers_are_distinct() -> None:
    samples = {generate_verifier() for _ in range(1000)}
    assert len(samples) == 1000


def test_challenge_is_deterministic() -> None:
    verifier = generate_verifier()
    assert derive_challenge(verifier) == derive_challenge(verifier)


def test_challenge_matches_rfc7636_example() -> None:
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    assert derive_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_challenge_is_unpadded_sha256() -> None:
    verifier = "abc123"
    expected = base64.urlsafe_b64encode(hashlib.sha256(b"abc123").digest()).decode().rstrip("=")
    assert derive_challenge(verifier) == expected
    assert "=" not in derive_challenge(verifier)


def test_state_values_are_distinct() -> None:
    assert generate_state() != generate_state()
