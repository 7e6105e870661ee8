from __future__ import annotations

import logging
from typing import Any, Callable, ContextManager

from app.errors import (
    Failure,
    FullSuccess,
    MediaUploadFailed,
    NoFileSelected,
    NotAuthenticated,
    PartialSuccess,
    PostCreationFailed,
    PostResult,
    provider_detail,
)
from app.state import SessionStore
from app.uploads import stage_upload

logger = logging.getLogger("x-image-poster")

Stager = Callable[[bytes], ContextManager[Any]]


def _read_staged(staged: Any, fallback: bytes) -> bytes:
    # Fakes used in tests may hand back something that is not a path.
    read_bytes = getattr(staged, "read_bytes", None)
    return read_bytes() if callable(read_bytes) else fallback


class PostingController:
    """Upload an image, then post it; fall back to a text-only post when the upload fails."""

    def __init__(self, store: SessionStore, client, stager: Stager | None = None, upload_dir: str = "uploads") -> None:
        self.store = store
        self.client = client
        self._stager = stager or (lambda data: stage_upload(data, upload_dir))

    def post(self, session_id: str, image_bytes: bytes | None, caption_text: str | None = "") -> PostResult:
        access_token = self.store.get(session_id).access_token
        if not access_token:
            raise NotAuthenticated()
        if not image_bytes:
            logger.info("post_rejected reason=no_file_selected")
            return Failure(NoFileSelected())

        caption = caption_text or ""
        with self._stager(image_bytes) as staged:
            media = self._upload(access_token, _read_staged(staged, image_bytes))
            if isinstance(media, str):
                return self._create(access_token, caption, media_id=media)

            if not caption:
                return Failure(media)
            logger.info("post_fallback reason=media_upload_failed mode=text_only")
            outcome = self._create(access_token, caption)
            if isinstance(outcome, FullSuccess):
                return PartialSuccess(outcome.post_id, media)
            return outcome

    def _upload(self, access_token: str, data: bytes) -> str | MediaUploadFailed:
        result = self.client.upload_media(access_token, data)
        body = result.get("json") if isinstance(result.get("json"), dict) else {}
        media_id = body.get("media_id_string") if result.get("ok") else None
        if media_id:
            return str(media_id)
        detail = provider_detail(result.get("error") or body, "Media upload failed")
        logger.warning("media_upload_fail detail=%s", detail)
        return MediaUploadFailed(detail)

    def _create(self, access_token: str, text: str, media_id: str | None = None) -> FullSuccess | Failure:
        result = self.client.create_post(access_token, text, media_id=media_id)
        body = result.get("json") if isinstance(result.get("json"), dict) else {}
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        post_id = data.get("id") if result.get("ok") else None
        if post_id:
            logger.info("post_created post_id=%s with_media=%s", post_id, media_id is not None)
            return FullSuccess(str(post_id))
        detail = provider_detail(result.get("error") or body, "Post creation failed")
        logger.warning("create_post_fail detail=%s", detail)
        return Failure(PostCreationFailed(detail))
