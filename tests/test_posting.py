from pathlib import Path

import pytest

from app.errors import (
    Failure,
    FullSuccess,
    MediaUploadFailed,
    NoFileSelected,
    NotAuthenticated,
    PartialSuccess,
    PostCreationFailed,
)
from app.posting import PostingController
from app.state import SessionStore

from conftest import fail, ok

IMAGE = b"\x89PNG\r\n\x1a\nfake-image"


@pytest.fixture
def store() -> SessionStore:
    store = SessionStore()
    store.set_tokens("s1", "tok1", "ref1")
    return store


def test_unauthenticated_post_makes_no_calls(fake_client, stager) -> None:
    controller = PostingController(SessionStore(), fake_client, stager=stager)

    with pytest.raises(NotAuthenticated):
        controller.post("s1", IMAGE, "hello")

    assert fake_client.calls == []
    assert stager.acquired == 0


def test_empty_image_is_no_file_selected(store, fake_client, stager) -> None:
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", b"", "hello")

    assert isinstance(result, Failure)
    assert isinstance(result.error, NoFileSelected)
    assert result.detail == "no file selected"
    assert fake_client.calls == []


def test_full_success(store, fake_client, stager) -> None:
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", IMAGE, "caption")

    assert result == FullSuccess("post-1")
    assert fake_client.named("upload_media") == [("tok1", IMAGE)]
    assert fake_client.named("create_post") == [("tok1", "caption", "media-1")]
    assert (stager.acquired, stager.released) == (1, 1)


def test_full_success_with_empty_caption(store, fake_client, stager) -> None:
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", IMAGE, None)

    assert isinstance(result, FullSuccess)
    assert fake_client.named("create_post") == [("tok1", "", "media-1")]


def test_media_failure_falls_back_to_text_post(store, fake_client, stager) -> None:
    fake_client.upload_result = fail({"detail": "Unsupported Authentication"}, status_code=403)
    fake_client.post_results = [ok({"data": {"id": "post-2"}})]
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", IMAGE, "caption")

    assert isinstance(result, PartialSuccess)
    assert result.post_id == "post-2"
    assert result.media_error_detail == "Unsupported Authentication"
    assert fake_client.named("create_post") == [("tok1", "caption", None)]
    assert (stager.acquired, stager.released) == (1, 1)


def test_media_failure_without_caption_has_no_fallback(store, fake_client, stager) -> None:
    fake_client.upload_result = fail({"detail": "Unsupported Authentication"}, status_code=403)
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", IMAGE, "")

    assert isinstance(result, Failure)
    assert isinstance(result.error, MediaUploadFailed)
    assert result.detail == "Unsupported Authentication"
    assert fake_client.named("create_post") == []
    assert (stager.acquired, stager.released) == (1, 1)


def test_media_and_fallback_failure(store, fake_client, stager) -> None:
    fake_client.upload_result = fail("connection reset", status_code=None)
    fake_client.post_results = [fail({"title": "Forbidden", "detail": "duplicate content"}, status_code=403)]
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", IMAGE, "caption")

    assert isinstance(result, Failure)
    assert isinstance(result.error, PostCreationFailed)
    assert result.detail == "duplicate content"
    assert len(fake_client.named("create_post")) == 1
    assert (stager.acquired, stager.released) == (1, 1)


def test_post_creation_failure_after_upload(store, fake_client, stager) -> None:
    fake_client.post_results = [fail({"detail": "Too Many Requests"}, status_code=429)]
    controller = PostingController(store, fake_client, stager=stager)

    result = controller.post("s1", IMAGE, "caption")

    assert isinstance(result, Failure)
    assert isinstance(result.error, PostCreationFailed)
    assert (stager.acquired, stager.released) == (1, 1)


def test_staged_upload_released_when_client_raises(store, fake_client, stager) -> None:
    def explode(access_token, image_bytes):
        raise RuntimeError("boom")

    fake_client.upload_media = explode
    controller = PostingController(store, fake_client, stager=stager)

    with pytest.raises(RuntimeError):
        controller.post("s1", IMAGE, "caption")
    assert (stager.acquired, stager.released) == (1, 1)


def test_default_staging_removes_temp_file(store, fake_client, tmp_path) -> None:
    upload_dir = tmp_path / "uploads"
    seen: list[Path] = []

    def upload_media(access_token, image_bytes):
        seen.extend(upload_dir.iterdir())
        return ok({"media_id_string": "media-1"})

    fake_client.upload_media = upload_media
    controller = PostingController(store, fake_client, upload_dir=str(upload_dir))

    result = controller.post("s1", IMAGE, "caption")

    assert isinstance(result, FullSuccess)
    assert len(seen) == 1
    assert list(upload_dir.iterdir()) == []
