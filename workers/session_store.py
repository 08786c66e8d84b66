"""Thread-safe in-memory store of journey sessions.

Nothing is persisted; a restart forgets every session.
"""

import threading
import uuid
from typing import Callable

from errors import SessionNotFoundError
from journey.session import JourneySession


class SessionStore:
    def __init__(self, factory: Callable[[], JourneySession]):
        self._factory = factory
        self._lock = threading.Lock()
        self._sessions: dict[str, JourneySession] = {}

    def create(self) -> tuple[str, JourneySession]:
        session_id = str(uuid.uuid4())
        session = self._factory()
        with self._lock:
            self._sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> JourneySession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found.")
        return session

    def drop(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def reset(self) -> None:
        """Clear all sessions. Used for testing."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
