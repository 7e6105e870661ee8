from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

GENERIC_PROVIDER_ERROR = "Unexpected error from X API"


def provider_detail(body: Any, fallback: str | None = None) -> str:
    """Pull a human-readable message out of an X API error body."""
    if isinstance(body, dict):
        for key in ("detail", "error_description", "title", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            message = errors[0].get("message") or errors[0].get("detail")
            if message:
                return str(message)
        if "raw" in body and body["raw"]:
            return str(body["raw"])
    elif isinstance(body, str) and body:
        return body
    return fallback or GENERIC_PROVIDER_ERROR


class XImagePosterError(Exception):
    code = "error"
    default_detail = "Unexpected error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthorizationError(XImagePosterError):
    pass


class AuthorizationDenied(AuthorizationError):
    code = "authorization_denied"
    default_detail = "Authorization was denied"


class TokenExchangeFailed(AuthorizationError):
    code = "token_exchange_failed"
    default_detail = "Token exchange failed"


class PostingError(XImagePosterError):
    pass


class NotAuthenticated(PostingError):
    code = "not_authenticated"
    default_detail = "Not connected to X"


class NoFileSelected(PostingError):
    code = "no_file_selected"
    default_detail = "no file selected"


class MediaUploadFailed(PostingError):
    code = "media_upload_failed"
    default_detail = "Media upload failed"


class PostCreationFailed(PostingError):
    code = "post_creation_failed"
    default_detail = "Post creation failed"


@dataclass(frozen=True)
class FullSuccess:
    post_id: str
    kind = "full_success"


@dataclass(frozen=True)
class PartialSuccess:
    post_id: str
    media_error: MediaUploadFailed
    kind = "partial_success"

    @property
    def media_error_detail(self) -> str:
        return self.media_error.detail


@dataclass(frozen=True)
class Failure:
    error: PostingError
    kind = "failure"

    @property
    def detail(self) -> str:
        return self.error.detail


PostResult = Union[FullSuccess, PartialSuccess, Failure]
