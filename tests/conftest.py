"""Shared test fixtures."""

import random
import threading
from dataclasses import dataclass, field

import pytest

from gift_exchange.adapters.memory_session_repository import (
    InMemorySessionRepository,
)
from gift_exchange.config import Settings
from gift_exchange.containers import AppContainer, build_container
from gift_exchange.domain.models import Group, Pairing, Participant
from gift_exchange.services.matching import MatchingEngine
from gift_exchange.services.sessions import SessionService


def make_roster(
    houses: dict[str, list[str]],
) -> tuple[list[Group], list[Participant]]:
    """Build groups and participants from ``{house_id: [person ids]}``."""
    groups = [Group(id=house_id, name=house_id.title()) for house_id in houses]
    participants = [
        Participant(id=person_id, name=person_id.upper(), group_id=house_id)
        for house_id, people in houses.items()
        for person_id in people
    ]
    return groups, participants


def roster_payload(houses: dict[str, list[str]]) -> dict[str, object]:
    """Build the JSON body the setup screen posts."""
    groups, participants = make_roster(houses)
    return {
        "houses": [{"id": group.id, "name": group.name} for group in groups],
        "people": [
            {"id": person.id, "name": person.name, "houseId": person.group_id}
            for person in participants
        ],
    }


def assert_valid_draw(participants: list[Participant], pairings: list[Pairing]) -> None:
    groups = {participant.id: participant.group_id for participant in participants}
    assert len(pairings) == len(participants)
    assert {p.giver_id for p in pairings} == set(groups)
    assert {p.receiver_id for p in pairings} == set(groups)
    for pairing in pairings:
        assert pairing.giver_id != pairing.receiver_id
        assert groups[pairing.giver_id] != groups[pairing.receiver_id]


@dataclass
class CountingEngine(MatchingEngine):
    """Matching engine that records each draw call."""

    calls: list[int] = field(default_factory=list)

    def draw(self, participants):
        self.calls.append(len(participants))
        return super().draw(participants)


class CountingRandom(random.Random):
    """Seeded random source that counts shuffles."""

    def __init__(self, seed: int = 0) -> None:
        super().__init__(seed)
        self.shuffles = 0

    def shuffle(self, x) -> None:
        self.shuffles += 1
        super().shuffle(x)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        max_draw_attempts=100,
        precompute_draw=True,
        feasibility_precheck=False,
        session_id_bytes=12,
        allowed_origins="*",
    )


@pytest.fixture
def repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def engine() -> CountingEngine:
    return CountingEngine(rng=random.Random(1234))


@pytest.fixture
def session_service(
    repository: InMemorySessionRepository, engine: CountingEngine
) -> SessionService:
    return SessionService(repository=repository, engine=engine)


@pytest.fixture
def lazy_session_service(
    repository: InMemorySessionRepository, engine: CountingEngine
) -> SessionService:
    return SessionService(repository=repository, engine=engine, precompute_draw=False)


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings, rng=random.Random(42))


@dataclass
class SelfGiftEngine(MatchingEngine):
    """Broken engine that pairs everyone with themselves."""

    def draw(self, participants):
        return [Pairing(giver_id=p.id, receiver_id=p.id) for p in participants]


@dataclass
class BlockingEngine(MatchingEngine):
    """Engine whose draw waits until released, like a slow search."""

    started: threading.Event = field(default_factory=threading.Event)
    release: threading.Event = field(default_factory=threading.Event)
    finished: threading.Event = field(default_factory=threading.Event)

    def draw(self, participants):
        self.started.set()
        self.release.wait(timeout=5)
        try:
            return super().draw(participants)
        finally:
            self.finished.set()
