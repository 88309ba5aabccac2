"""Session storage.

The engine never assumes where sessions live; it reads and writes them through
a SessionStore. The default keeps them in process memory for the lifetime of
the server. Eviction and persistence are left to other implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock

from privmx_mcp.sessions.models import Session


class SessionStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> Session | None:
        """Return the session or None."""

    @abstractmethod
    def put(self, session: Session) -> None:
        """Insert or replace a session by id."""

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Remove a session; False if it was not stored."""

    @abstractmethod
    def list(self) -> list[Session]:
        """All sessions, oldest first."""


class InMemorySessionStore(SessionStore):
    """Thread-safe dict-backed store."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = RLock()

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.id] = session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list(self) -> list[Session]:
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.started_at)
