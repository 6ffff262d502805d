"""In-memory session store keyed by random session ids."""

import logging
import secrets
import threading
import time

from root_explorer.constants import DEFAULT_SESSION_TTL_SECONDS, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class SessionManager:
    """Thread-safe map of session id -> (username, expires_at).

    Sessions live only in this process; run_server.py starts Gunicorn with a
    single worker so every request sees the same store.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS, clock=time.time):
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def create(self, username: str) -> str:
        session_id = secrets.token_hex(32)
        with self._lock:
            self._sessions[session_id] = (username, self._clock() + self._ttl)
        return session_id

    def validate(self, session_id: str | None) -> str | None:
        """Return the username for a live session; expired sessions are dropped."""
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            username, expires_at = entry
            if expires_at < self._clock():
                del self._sessions[session_id]
                return None
            return username

    def destroy(self, session_id: str | None) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def destroy_user(self, username: str) -> int:
        """Drop every session of a user (after the account is deleted)."""
        with self._lock:
            stale = [sid for sid, (name, _) in self._sessions.items() if name == username]
            for sid in stale:
                del self._sessions[sid]
        return len(stale)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [sid for sid, (_, exp) in self._sessions.items() if exp < now]
            for sid in stale:
                del self._sessions[sid]
        if stale:
            logger.debug("Purged %d expired session(s)", len(stale))
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
