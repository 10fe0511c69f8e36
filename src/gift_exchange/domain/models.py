"""Domain models for gift exchange sessions."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Group:
    """A household; participants in the same group never draw each other."""

    id: str
    name: str


@dataclass(frozen=True)
class Participant:
    """A person taking part in the exchange."""

    id: str
    name: str
    group_id: str
    claimed: bool = False


@dataclass(frozen=True)
class Pairing:
    """Directed giver -> receiver edge."""

    giver_id: str
    receiver_id: str


@dataclass
class Session:
    """Session record owned by the session repository."""

    id: str
    groups: list[Group]
    participants: list[Participant]
    created_at: datetime
    pairings: list[Pairing] = field(default_factory=list)
    complete: bool = False

    def find_participant(self, participant_id: str) -> Participant | None:
        """Return the participant with the given id, if present."""
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def all_claimed(self) -> bool:
        return all(participant.claimed for participant in self.participants)


@dataclass(frozen=True)
class SessionView:
    """Public projection of a session; never carries pairings."""

    id: str
    groups: tuple[Group, ...]
    participants: tuple[Participant, ...]
    complete: bool

    @classmethod
    def from_session(cls, session: Session) -> "SessionView":
        return cls(
            id=session.id,
            groups=tuple(session.groups),
            participants=tuple(session.participants),
            complete=session.complete,
        )
