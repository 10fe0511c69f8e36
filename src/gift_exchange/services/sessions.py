"""Session lifecycle: creation, claims and lazy draws."""

import logging
import secrets
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from threading import Lock
from typing import Protocol

from gift_exchange.domain.errors import (
    AlreadyClaimedError,
    InfeasibleMatchingError,
    ParticipantNotFoundError,
    SessionNotFoundError,
    ValidationError,
)
from gift_exchange.domain.models import (
    Group,
    Pairing,
    Participant,
    Session,
    SessionView,
)
from gift_exchange.services.matching import MatchingEngine, validate_assignments

MIN_SESSION_ID_BYTES = 12

_logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
    """Storage interface for gift exchange sessions."""

    def add(self, session: Session) -> None:
        """Store a new session."""

    def get(self, session_id: str) -> Session | None:
        """Return a session by id, if present."""

    def save(self, session: Session) -> None:
        """Persist changes to an existing session."""

    def exists(self, session_id: str) -> bool:
        """Return True if a session with this id is stored."""


@dataclass
class SessionService:
    """Owns session state and decides when the draw runs."""

    repository: SessionRepository
    engine: MatchingEngine
    precompute_draw: bool = True
    session_id_bytes: int = MIN_SESSION_ID_BYTES
    _locks: dict[str, Lock] = field(default_factory=dict, init=False, repr=False)
    _locks_guard: Lock = field(default_factory=Lock, init=False, repr=False)

    def create_session(
        self, groups: Sequence[Group], participants: Sequence[Participant]
    ) -> Session:
        """Create a session, drawing immediately when precompute is enabled."""
        validate_roster(groups, participants)
        people = [replace(participant, claimed=False) for participant in participants]
        pairings = self._draw(people) if self.precompute_draw else []
        session = Session(
            id=self._new_session_id(),
            groups=list(groups),
            participants=people,
            created_at=datetime.now(tz=UTC),
            pairings=pairings,
            complete=bool(pairings),
        )
        self.repository.add(session)
        _logger.info(
            "Session created: session_id=%s participants=%s complete=%s",
            session.id,
            len(people),
            session.complete,
        )
        return session

    def get_session(self, session_id: str) -> SessionView | None:
        """Return the public view of a session, if present."""
        session = self.repository.get(session_id)
        if session is None:
            return None
        return SessionView.from_session(session)

    def claim_participant(self, session_id: str, participant_id: str) -> None:
        """Mark a participant as claimed, drawing once everyone has claimed."""
        if not self.repository.exists(session_id):
            raise SessionNotFoundError
        with self._lock_for(session_id):
            session = self.repository.get(session_id)
            if session is None:
                raise SessionNotFoundError
            participant = session.find_participant(participant_id)
            if participant is None:
                raise ParticipantNotFoundError
            if participant.claimed:
                raise AlreadyClaimedError
            session.participants = [
                replace(p, claimed=True) if p.id == participant_id else p
                for p in session.participants
            ]
            _logger.info(
                "Participant claimed: session_id=%s participant_id=%s",
                session_id,
                participant_id,
            )
            if not session.complete and session.all_claimed():
                _logger.info("All participants claimed: session_id=%s", session_id)
                session.pairings = self._draw(session.participants)
                session.complete = bool(session.pairings)
            self.repository.save(session)

    def receiver_for(self, session_id: str, giver_id: str) -> str | None:
        """Return the receiver id for a giver once the draw is complete."""
        session = self.repository.get(session_id)
        if session is None or not session.complete:
            return None
        for pairing in session.pairings:
            if pairing.giver_id == giver_id:
                return pairing.receiver_id
        return None

    def reveal_receiver(self, session_id: str, giver_id: str) -> Participant | None:
        """Return the receiver's participant record for display."""
        receiver_id = self.receiver_for(session_id, giver_id)
        if receiver_id is None:
            return None
        session = self.repository.get(session_id)
        return session.find_participant(receiver_id) if session else None

    def draw(
        self, groups: Sequence[Group], participants: Sequence[Participant]
    ) -> list[Pairing]:
        """Run a one-off draw without creating a session."""
        validate_roster(groups, participants)
        pairings = self._draw(participants)
        if not pairings:
            raise InfeasibleMatchingError(
                "No valid draw: every household needs someone outside it to gift"
            )
        return pairings

    def _draw(self, participants: Sequence[Participant]) -> list[Pairing]:
        pairings = self.engine.draw(participants)
        if pairings:
            validate_assignments(participants, pairings)
        return pairings

    def _new_session_id(self) -> str:
        nbytes = max(self.session_id_bytes, MIN_SESSION_ID_BYTES)
        session_id = secrets.token_hex(nbytes)
        while self.repository.exists(session_id):
            session_id = secrets.token_hex(nbytes)
        return session_id

    def _lock_for(self, session_id: str) -> Lock:
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = Lock()
                self._locks[session_id] = lock
            return lock


def validate_roster(
    groups: Sequence[Group], participants: Sequence[Participant]
) -> None:
    """Reject rosters that cannot describe a session."""
    if len(participants) < 2:
        raise ValidationError("At least two people are required")
    group_ids = [group.id for group in groups]
    if any(not group_id for group_id in group_ids):
        raise ValidationError("Every house needs an id")
    if len(set(group_ids)) != len(group_ids):
        raise ValidationError("House ids must be unique")
    participant_ids = [participant.id for participant in participants]
    if any(not participant_id for participant_id in participant_ids):
        raise ValidationError("Every person needs an id")
    if len(set(participant_ids)) != len(participant_ids):
        raise ValidationError("Person ids must be unique")
    known = set(group_ids)
    for participant in participants:
        if participant.group_id not in known:
            raise ValidationError(
                f"Person {participant.id} references unknown house "
                f"{participant.group_id}"
            )
