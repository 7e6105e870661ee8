from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

UNAUTHENTICATED = "unauthenticated"
PENDING_CALLBACK = "pending_callback"
AUTHENTICATED = "authenticated"


@dataclass
class AuthorizationState:
    code_verifier: str | None = None
    oauth_state: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    updated_at: float = 0.0

    @property
    def status(self) -> str:
        if self.access_token:
            return AUTHENTICATED
        if self.code_verifier:
            return PENDING_CALLBACK
        return UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)


@dataclass
class SessionStore:
    """In-memory authorization state keyed by browser session id.

    Records idle for longer than ``max_age`` seconds are dropped on the next
    access. Nothing survives a process restart.
    """

    max_age: float = 3600.0
    clock: Callable[[], float] = time.monotonic
    _records: dict[str, AuthorizationState] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)

    def get(self, session_id: str) -> AuthorizationState:
        with self._lock:
            return self._get_locked(session_id)

    def status(self, session_id: str) -> str:
        return self.get(session_id).status

    def set_verifier(self, session_id: str, verifier: str, oauth_state: str | None = None) -> None:
        with self._lock:
            record = self._get_locked(session_id)
            record.code_verifier = verifier
            record.oauth_state = oauth_state

    def pop_verifier(self, session_id: str) -> tuple[str | None, str | None]:
        with self._lock:
            record = self._get_locked(session_id)
            verifier, oauth_state = record.code_verifier, record.oauth_state
            record.code_verifier = None
            record.oauth_state = None
            return verifier, oauth_state

    def set_tokens(self, session_id: str, access_token: str, refresh_token: str | None) -> None:
        with self._lock:
            record = self._get_locked(session_id)
            record.access_token = access_token
            record.refresh_token = refresh_token
            record.code_verifier = None
            record.oauth_state = None

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._records.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._records)

    def _get_locked(self, session_id: str) -> AuthorizationState:
        self._purge_expired()
        now = self.clock()
        record = self._records.get(session_id)
        if record is None:
            record = AuthorizationState()
            self._records[session_id] = record
        record.updated_at = now
        return record

    def _purge_expired(self) -> None:
        cutoff = self.clock() - self.max_age
        expired = [sid for sid, record in self._records.items() if record.updated_at < cutoff]
        for sid in expired:
            del self._records[sid]
