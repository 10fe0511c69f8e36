"""Error taxonomy for gift exchange operations."""


class GiftExchangeError(Exception):
    """Base class for recoverable, client-facing errors."""

    reason = "Bad Request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class ValidationError(GiftExchangeError):
    """Malformed or missing input."""


class NotFoundError(GiftExchangeError):
    """Unknown session or participant."""

    reason = "Not Found"


class SessionNotFoundError(NotFoundError):
    reason = "NOT_FOUND"


class ParticipantNotFoundError(NotFoundError):
    reason = "PERSON_NOT_FOUND"


class ReceiverNotAvailableError(NotFoundError):
    """The draw is not complete or the giver has no pairing."""

    reason = "NOT_AVAILABLE"


class ConflictError(GiftExchangeError):
    """Operation conflicts with the current session state."""

    reason = "CONFLICT"


class AlreadyClaimedError(ConflictError):
    reason = "ALREADY_CLAIMED"


class InfeasibleMatchingError(GiftExchangeError):
    """No valid pairing was found within the retry budget."""

    reason = "INFEASIBLE"


class PairingInvariantError(RuntimeError):
    """A computed pairing violates the bijection or exclusion rules."""
