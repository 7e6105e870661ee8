from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

from app.config import Settings
from app.errors import AuthorizationDenied, TokenExchangeFailed, provider_detail
from app.pkce import derive_challenge, generate_state, generate_verifier
from app.state import AuthorizationState, SessionStore

logger = logging.getLogger("x-image-poster")


class AuthorizationFlow:
    """Per-session OAuth2 PKCE flow: unauthenticated -> pending_callback -> authenticated."""

    def __init__(self, settings: Settings, store: SessionStore, client) -> None:
        self.settings = settings
        self.store = store
        self.client = client

    def begin_authorization(self, session_id: str) -> str:
        verifier = generate_verifier()
        oauth_state = generate_state()
        self.store.set_verifier(session_id, verifier, oauth_state)
        params = {
            "response_type": "code",
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "scope": self.settings.scopes,
            "state": oauth_state,
            "code_challenge": derive_challenge(verifier),
            "code_challenge_method": "S256",
        }
        logger.info("authorization_started session=%s", _short(session_id))
        return f"{self.settings.authorize_url}?{urlencode(params)}"

    def handle_callback(
        self,
        session_id: str,
        code: str | None,
        returned_state: str | None,
        error: str | None = None,
    ) -> AuthorizationState:
        # The verifier is single use; it is gone from the store on every path below.
        verifier, expected_state = self.store.pop_verifier(session_id)

        if error or not code:
            logger.warning("authorization_denied session=%s error=%s", _short(session_id), error)
            raise AuthorizationDenied(error)
        if not verifier:
            logger.warning("token_exchange_fail session=%s reason=no_verifier", _short(session_id))
            raise TokenExchangeFailed("No authorization in progress for this session")
        if expected_state is not None and not (
            returned_state and secrets.compare_digest(returned_state, expected_state)
        ):
            logger.warning("token_exchange_fail session=%s reason=state_mismatch", _short(session_id))
            raise TokenExchangeFailed("state mismatch")

        result = self.client.exchange_code(code, verifier)
        body = result.get("json") if isinstance(result.get("json"), dict) else {}
        access_token = body.get("access_token") if result.get("ok") else None
        if not access_token:
            detail = provider_detail(result.get("error") or body, "Token exchange failed")
            logger.warning("token_exchange_fail session=%s detail=%s", _short(session_id), detail)
            raise TokenExchangeFailed(detail)

        self.store.set_tokens(session_id, access_token, body.get("refresh_token"))
        logger.info("authorization_complete session=%s", _short(session_id))
        return self.store.get(session_id)

    def logout(self, session_id: str) -> None:
        self.store.clear(session_id)
        logger.info("logout session=%s", _short(session_id))


def _short(session_id: str) -> str:
    return session_id[:8]
