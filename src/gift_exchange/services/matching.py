"""Randomized constrained matching of givers to receivers."""

import logging
import random
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from gift_exchange.domain.errors import PairingInvariantError
from gift_exchange.domain.models import Participant, Pairing

MAX_DRAW_ATTEMPTS = 100

_logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """One level of the backtracking search: a giver and its candidates."""

    giver: Participant
    candidates: list[Participant]
    cursor: int = 0
    committed: Participant | None = None


def compute_assignments(
    participants: Sequence[Participant],
    *,
    max_attempts: int = MAX_DRAW_ATTEMPTS,
    rng: random.Random | None = None,
) -> list[Pairing]:
    """Draw a full pairing, or return an empty list when none was found.

    Each attempt visits givers in a freshly shuffled order and reshuffles the
    receiver candidates at every decision point. A valid receiver is not the
    giver, not in the giver's group, and not already drawn in this attempt.
    Gives up after ``max_attempts`` restarts; an empty result may therefore
    also mean the search was unlucky on a solvable input.
    """
    people = list(participants)
    if not people:
        return []
    source = rng or random.SystemRandom()
    for attempt in range(1, max_attempts + 1):
        order = list(people)
        source.shuffle(order)
        pairings = _search(order, people, source)
        if pairings is not None:
            validate_assignments(people, pairings)
            _logger.info(
                "Draw succeeded: participants=%s attempt=%s", len(people), attempt
            )
            return pairings
    _logger.warning(
        "Draw found no valid pairing: participants=%s attempts=%s",
        len(people),
        max_attempts,
    )
    return []


def _search(
    order: list[Participant], people: list[Participant], rng: random.Random
) -> list[Pairing] | None:
    used: set[str] = set()
    pairings: list[Pairing] = []
    stack = [_Frame(giver=order[0], candidates=_shuffled(people, rng))]
    while stack:
        frame = stack[-1]
        if frame.committed is not None:
            # Back from a dead end below; release this frame's receiver.
            used.discard(frame.committed.id)
            pairings.pop()
            frame.committed = None
        receiver = _next_candidate(frame, used)
        if receiver is None:
            stack.pop()
            continue
        used.add(receiver.id)
        pairings.append(Pairing(giver_id=frame.giver.id, receiver_id=receiver.id))
        frame.committed = receiver
        depth = len(pairings)
        if depth == len(order):
            return pairings
        stack.append(_Frame(giver=order[depth], candidates=_shuffled(people, rng)))
    return None


def _shuffled(people: list[Participant], rng: random.Random) -> list[Participant]:
    candidates = list(people)
    rng.shuffle(candidates)
    return candidates


def _next_candidate(frame: _Frame, used: set[str]) -> Participant | None:
    while frame.cursor < len(frame.candidates):
        candidate = frame.candidates[frame.cursor]
        frame.cursor += 1
        if _is_valid(frame.giver, candidate, used):
            return candidate
    return None


def _is_valid(giver: Participant, receiver: Participant, used: set[str]) -> bool:
    return (
        giver.id != receiver.id
        and giver.group_id != receiver.group_id
        and receiver.id not in used
    )


def validate_assignments(
    participants: Sequence[Participant], pairings: Sequence[Pairing]
) -> None:
    """Raise ``PairingInvariantError`` unless pairings form a valid full draw."""
    groups = {participant.id: participant.group_id for participant in participants}
    givers = [pairing.giver_id for pairing in pairings]
    receivers = [pairing.receiver_id for pairing in pairings]
    if len(pairings) != len(groups):
        raise PairingInvariantError(
            f"Expected {len(groups)} pairings, got {len(pairings)}"
        )
    if set(givers) != set(groups) or len(set(givers)) != len(givers):
        raise PairingInvariantError("Givers do not cover every participant once")
    if set(receivers) != set(groups) or len(set(receivers)) != len(receivers):
        raise PairingInvariantError("Receivers do not cover every participant once")
    for pairing in pairings:
        if pairing.giver_id == pairing.receiver_id:
            raise PairingInvariantError(f"{pairing.giver_id} draws themselves")
        if groups[pairing.giver_id] == groups[pairing.receiver_id]:
            raise PairingInvariantError(
                f"{pairing.giver_id} draws {pairing.receiver_id} from the same group"
            )


def is_trivially_infeasible(participants: Sequence[Participant]) -> bool:
    """Return True for fewer than two people or fewer than two groups."""
    if len(participants) < 2:
        return True
    return len({participant.group_id for participant in participants}) < 2


def has_feasible_group_sizes(participants: Sequence[Participant]) -> bool:
    """Return True when no group holds more than half of all participants.

    A full draw exists exactly when this holds, since every member of the
    largest group needs a distinct receiver outside it.
    """
    if not participants:
        return False
    largest = max(Counter(p.group_id for p in participants).values())
    return largest * 2 <= len(participants)


@dataclass
class MatchingEngine:
    """Draws pairings with configured retry budget and random source."""

    max_attempts: int = MAX_DRAW_ATTEMPTS
    feasibility_precheck: bool = False
    rng: random.Random = field(default_factory=random.SystemRandom)

    def draw(self, participants: Sequence[Participant]) -> list[Pairing]:
        """Return a full pairing, or an empty list when infeasible."""
        if is_trivially_infeasible(participants):
            _logger.info(
                "Draw skipped: participants=%s span fewer than two groups",
                len(participants),
            )
            return []
        if self.feasibility_precheck and not has_feasible_group_sizes(participants):
            _logger.info(
                "Draw skipped: largest group exceeds half of %s participants",
                len(participants),
            )
            return []
        return compute_assignments(
            participants, max_attempts=self.max_attempts, rng=self.rng
        )
