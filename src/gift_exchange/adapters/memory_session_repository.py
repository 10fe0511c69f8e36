"""In-process session repository."""

from dataclasses import dataclass, field, replace
from threading import Lock

from gift_exchange.domain.models import Session
from gift_exchange.services.sessions import SessionRepository


@dataclass
class InMemorySessionRepository(SessionRepository):
    """Keeps sessions in a dict for the lifetime of the process.

    Sessions are copied on the way in and out so callers never hold a
    reference to the stored record.
    """

    _sessions: dict[str, Session] = field(
        default_factory=dict, init=False, repr=False
    )
    _guard: Lock = field(default_factory=Lock, init=False, repr=False)

    def add(self, session: Session) -> None:
        """Store a new session."""
        with self._guard:
            if session.id in self._sessions:
                raise RuntimeError(f"Session {session.id} already exists")
            self._sessions[session.id] = _copy(session)

    def get(self, session_id: str) -> Session | None:
        """Return a copy of the stored session, if present."""
        with self._guard:
            session = self._sessions.get(session_id)
            return _copy(session) if session else None

    def save(self, session: Session) -> None:
        """Replace the stored session with the given state."""
        with self._guard:
            if session.id not in self._sessions:
                raise RuntimeError(f"Session {session.id} does not exist")
            self._sessions[session.id] = _copy(session)

    def exists(self, session_id: str) -> bool:
        with self._guard:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)


def _copy(session: Session) -> Session:
    # Group, Participant and Pairing are frozen; copying the lists is enough.
    return replace(
        session,
        groups=list(session.groups),
        participants=list(session.participants),
        pairings=list(session.pairings),
    )
