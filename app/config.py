from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger("x-image-poster")

DEFAULT_REDIRECT_URI = "http://localhost:8000/api/v1/x/login/social-media"
DEFAULT_SCOPES = "tweet.read tweet.write users.read"

X_AUTHORIZE_URL = "https://twitter.com/i/oauth2/authorize"
X_TOKEN_URL = "https://api.twitter.com/2/oauth2/token"
X_MEDIA_UPLOAD_URL = "https://upload.twitter.com/1.1/media/upload.json"
X_POSTS_URL = "https://api.twitter.com/2/tweets"


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    port: int = 8000
    redirect_uri: str = DEFAULT_REDIRECT_URI
    client_id: str = ""
    client_secret: str = ""
    session_secret: str = ""
    session_max_age: int = 3600
    session_https_only: bool = False
    scopes: str = DEFAULT_SCOPES
    authorize_url: str = X_AUTHORIZE_URL
    token_url: str = X_TOKEN_URL
    media_upload_url: str = X_MEDIA_UPLOAD_URL
    posts_url: str = X_POSTS_URL
    http_timeout: float = 20.0
    upload_dir: str = "uploads"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        session_secret = os.getenv("SESSION_SECRET", "").strip()
        if not session_secret:
            # Sessions will not survive a restart without a configured secret.
            logger.warning("session_secret_generated reason=SESSION_SECRET_not_configured")
            session_secret = secrets.token_hex(32)
        return cls(
            port=int(os.getenv("PORT", "8000")),
            redirect_uri=os.getenv("REDIRECT_URI", DEFAULT_REDIRECT_URI).strip() or DEFAULT_REDIRECT_URI,
            client_id=os.getenv("X_CLIENT_ID", "").strip(),
            client_secret=os.getenv("X_CLIENT_SECRET", "").strip(),
            session_secret=session_secret,
            session_max_age=int(os.getenv("SESSION_MAX_AGE", "3600")),
            session_https_only=_env_flag("SESSION_HTTPS_ONLY"),
            scopes=os.getenv("X_SCOPES", DEFAULT_SCOPES).strip() or DEFAULT_SCOPES,
            authorize_url=os.getenv("X_AUTHORIZE_URL", X_AUTHORIZE_URL),
            token_url=os.getenv("X_TOKEN_URL", X_TOKEN_URL),
            media_upload_url=os.getenv("X_MEDIA_UPLOAD_URL", X_MEDIA_UPLOAD_URL),
            posts_url=os.getenv("X_POSTS_URL", X_POSTS_URL),
            http_timeout=float(os.getenv("X_HTTP_TIMEOUT", "20.0")),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def callback_path(self) -> str:
        return urlparse(self.redirect_uri).path or "/"

    def missing_credentials(self) -> list[str]:
        missing = []
        if not self.client_id:
            missing.append("X_CLIENT_ID")
        if not self.client_secret:
            missing.append("X_CLIENT_SECRET")
        return missing
