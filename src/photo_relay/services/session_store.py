"""In-memory store of pending upload sessions."""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from photo_relay.domain.uploads import UploadSession

_MAX_ID_ATTEMPTS = 5


class SessionStore(Protocol):
    """Storage interface for resolvable upload sessions."""

    def register(self, locator: str) -> str:
        """Store a locator under a fresh upload id and return the id."""

    def resolve(self, upload_id: str) -> str | None:
        """Return the locator for a live session without removing it."""

    def retire(self, upload_id: str) -> bool:
        """Remove a session, returning whether it existed."""

    def pending_count(self) -> int:
        """Return the number of live sessions."""


def random_upload_id() -> str:
    """Return a short random id that fits in Telegram callback data."""
    return secrets.token_hex(8)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-local session store with optional TTL eviction.

    Without a TTL sessions live until retired. With one, expired sessions
    are dropped lazily whenever the store is touched.
    """

    _sessions: dict[str, UploadSession]
    ttl_seconds: int | None
    id_factory: Callable[[], str]
    clock: Callable[[], datetime]

    def __init__(
        self,
        ttl_seconds: int | None = None,
        id_factory: Callable[[], str] = random_upload_id,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._sessions = {}
        self.ttl_seconds = ttl_seconds
        self.id_factory = id_factory
        self.clock = clock

    def register(self, locator: str) -> str:
        """Register a locator and return its new upload id."""
        self.sweep()
        for _ in range(_MAX_ID_ATTEMPTS):
            upload_id = self.id_factory()
            if upload_id not in self._sessions:
                break
        else:
            raise RuntimeError("Upload id factory keeps returning live ids")
        self._sessions[upload_id] = UploadSession(
            id=upload_id, locator=locator, created_at=self.clock()
        )
        return upload_id

    def resolve(self, upload_id: str) -> str | None:
        """Return the session locator, or None if unknown, retired or expired."""
        self.sweep()
        session = self._sessions.get(upload_id)
        if session is None:
            return None
        return session.locator

    def retire(self, upload_id: str) -> bool:
        """Remove a session; retiring an unknown id is a no-op."""
        return self._sessions.pop(upload_id, None) is not None

    def pending_count(self) -> int:
        """Return the number of live sessions."""
        self.sweep()
        return len(self._sessions)

    def sweep(self) -> int:
        """Drop sessions older than the TTL and return how many were removed."""
        if self.ttl_seconds is None:
            return 0
        cutoff = self.clock() - timedelta(seconds=self.ttl_seconds)
        expired = [
            upload_id
            for upload_id, session in self._sessions.items()
            if session.created_at <= cutoff
        ]
        for upload_id in expired:
            del self._sessions[upload_id]
        return len(expired)
