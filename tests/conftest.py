from __future__ import annotations

from contextlib import contextmanager
from typing import Any

import pytest

from app.config import Settings


def ok(json_body: dict[str, Any], status_code: int = 200) -> dict[str, Any]:
    return {"ok": True, "status_code": status_code, "json": json_body, "error": None}


def fail(json_body: Any, status_code: int | None = 400) -> dict[str, Any]:
    return {"ok": False, "status_code": status_code, "json": json_body, "error": json_body}


class FakeXClient:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.token_result = ok({"access_token": "tok1", "refresh_token": "ref1"})
        self.upload_result = ok({"media_id_string": "media-1"})
        self.post_results: list[dict[str, Any]] = [ok({"data": {"id": "post-1", "text": ""}})]

    def exchange_code(self, code: str, code_verifier: str) -> dict[str, Any]:
        self.calls.append(("exchange_code", (code, code_verifier)))
        return self.token_result

    def upload_media(self, access_token: str, image_bytes: bytes) -> dict[str, Any]:
        self.calls.append(("upload_media", (access_token, image_bytes)))
        return self.upload_result

    def create_post(self, access_token: str, text: str, media_id: str | None = None) -> dict[str, Any]:
        self.calls.append(("create_post", (access_token, text, media_id)))
        return self.post_results.pop(0)

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]


class CountingStager:
    """Stands in for the temp-file staging and counts acquire/release."""

    def __init__(self) -> None:
        self.acquired = 0
        self.released = 0

    @contextmanager
    def __call__(self, data: bytes):
        self.acquired += 1
        try:
            yield data
        finally:
            self.released += 1


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        redirect_uri="http://localhost:8000/api/v1/x/login/social-media",
        client_id="client-id",
        client_secret="client-secret",
        session_secret="test-session-secret",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def fake_client() -> FakeXClient:
    return FakeXClient()


@pytest.fixture
def stager() -> CountingStager:
    return CountingStager()
