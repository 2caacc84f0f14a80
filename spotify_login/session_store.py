"""
Single-slot store for the in-flight authorization (code_verifier) between /login and /authcode.
At most one attempt is pending; a new login replaces the old one. Take-and-clear is atomic.
"""
import logging
import threading
import time
from dataclasses import dataclass

from spotify_login.config import SESSION_TTL

logger = logging.getLogger(__name__)


@dataclass
class PendingSession:
    code_verifier: str
    created_at: float

    def expired(self, ttl: float) -> bool:
        return (time.monotonic() - self.created_at) > ttl


class SessionStore:
    """
    Route handlers run in FastAPI's thread pool, so the slot is guarded by a lock. The lock is
    held only for the read/write, never across the token request.
    """

    def __init__(self, ttl: float = SESSION_TTL):
        self._ttl = ttl
        self._pending: PendingSession | None = None
        self._lock = threading.Lock()

    def begin_session(self, code_verifier: str) -> None:
        """Store a fresh verifier. Any previous pending attempt is discarded."""
        with self._lock:
            replaced = self._pending is not None
            self._pending = PendingSession(code_verifier=code_verifier, created_at=time.monotonic())
        if replaced:
            logger.warning("Discarded previous pending authorization; only the latest login can complete")

    def take_session(self) -> str | None:
        """Return and clear the pending verifier; None if nothing is pending or it has expired."""
        with self._lock:
            pending, self._pending = self._pending, None
        if pending is None:
            return None
        if pending.expired(self._ttl):
            logger.info("Pending authorization expired after %ss", self._ttl)
            return None
        return pending.code_verifier

    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None and not self._pending.expired(self._ttl)
