from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from app.config import Settings

logger = logging.getLogger("x-image-poster")


class XClient:
    """Blocking calls to the X API.

    Every method returns ``{"ok", "status_code", "json", "error"}`` and never
    raises for transport or provider failures; timeouts count as transport
    failures.
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self._http = httpx.Client(timeout=settings.http_timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def _post(self, event: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._http.post(url, **kwargs)
            try:
                body: Any = response.json()
            except ValueError:
                body = {"raw": response.text[:500]}
            if response.is_success:
                logger.info("%s_success status_code=%s", event, response.status_code)
                return {"ok": True, "status_code": response.status_code, "json": body, "error": None}
            logger.warning("%s_fail status_code=%s response=%s", event, response.status_code, body)
            return {"ok": False, "status_code": response.status_code, "json": body, "error": body}
        except httpx.HTTPError as exc:
            logger.warning("%s_fail status_code=%s response=%s", event, None, {"error": str(exc)})
            return {"ok": False, "status_code": None, "json": None, "error": str(exc) or exc.__class__.__name__}

    def exchange_code(self, code: str, code_verifier: str) -> dict[str, Any]:
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "code_verifier": code_verifier,
        }
        return self._post(
            "token_exchange",
            self.settings.token_url,
            data=data,
            auth=(self.settings.client_id, self.settings.client_secret),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def upload_media(self, access_token: str, image_bytes: bytes) -> dict[str, Any]:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        return self._post(
            "media_upload",
            self.settings.media_upload_url,
            files={"media_data": (None, encoded)},
            headers={"Authorization": f"Bearer {access_token}"},
        )

    def create_post(self, access_token: str, text: str, media_id: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": text}
        if media_id is not None:
            payload["media"] = {"media_ids": [media_id]}
        return self._post(
            "create_post",
            self.settings.posts_url,
            json=payload,
            headers={"Authorization": f"Bearer {access_token}"},
        )
