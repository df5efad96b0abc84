"""
In-memory session store.

Sessions live in a plain dict keyed by session id and are lost on restart.
The store is constructed explicitly and handed to the app, and takes its
notion of "now" from an injected clock so expiry can be tested without
waiting on the wall clock.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models.session import Session

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    def __init__(
        self,
        max_age: timedelta = timedelta(hours=24),
        clock: Clock = utc_now,
        prune_interval: timedelta = timedelta(minutes=1),
    ):
        self.max_age = max_age
        self.clock = clock
        self.prune_interval = prune_interval
        self._sessions: dict[str, Session] = {}
        self._last_prune: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Optional[Session]:
        """
        Returns the live session for session_id, or None.
        Expired records are dropped on lookup.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired(self.clock()):
            del self._sessions[session_id]
            return None
        return session

    def create(self) -> Session:
        """
        Starts a new session. Expired records are swept first, at most once
        per prune_interval, so cookieless clients cannot grow the table forever.
        """
        now = self.clock()
        if self._last_prune is None or now - self._last_prune >= self.prune_interval:
            self.prune()
            self._last_prune = now

        session_id = secrets.token_urlsafe(24)
        while session_id in self._sessions:
            session_id = secrets.token_urlsafe(24)

        session = Session(
            session_id=session_id,
            created_at=now,
            expires_at=now + self.max_age,
        )
        self._sessions[session_id] = session
        return session

    def prune(self) -> int:
        """Drops every expired session. Returns how many were removed."""
        now = self.clock()
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)
