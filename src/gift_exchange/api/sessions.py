"""Session endpoints consumed by the web client."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from gift_exchange.api.models import ClaimRequest, RosterRequest
from gift_exchange.domain.errors import NotFoundError, ReceiverNotAvailableError

if TYPE_CHECKING:
    from gift_exchange.containers import AppContainer
    from gift_exchange.domain.models import Pairing, SessionView

router = APIRouter(prefix="/api", tags=["sessions"])


@router.post("/sessions")
def create_session(payload: RosterRequest, request: Request) -> dict[str, str]:
    """Create a session and return its id for sharing."""
    container: AppContainer = request.app.state.container
    session = container.session_service.create_session(
        payload.groups(), payload.participants()
    )
    return {"id": session.id}


@router.get("/sessions/{session_id}")
async def read_session(session_id: str, request: Request) -> dict[str, object]:
    """Return the public session state; pairings are never included."""
    container: AppContainer = request.app.state.container
    view = container.session_service.get_session(session_id)
    if view is None:
        raise NotFoundError
    return _serialize_session(view)


@router.post("/sessions/{session_id}/claim", response_model=None)
def claim_participant(
    session_id: str, payload: ClaimRequest, request: Request
) -> dict[str, bool] | JSONResponse:
    """Check a person in; the last claim triggers a pending draw."""
    if not payload.person_id:
        return JSONResponse(
            {"error": "personId required"}, status_code=status.HTTP_400_BAD_REQUEST
        )
    container: AppContainer = request.app.state.container
    container.session_service.claim_participant(session_id, payload.person_id)
    return {"ok": True}


@router.get("/sessions/{session_id}/receiver/{person_id}")
async def read_receiver(
    session_id: str, person_id: str, request: Request
) -> dict[str, str]:
    """Reveal who a person gifts to.

    Clients show this once, right after their own claim succeeds; the server
    does not track whether it was shown before.
    """
    container: AppContainer = request.app.state.container
    receiver = container.session_service.reveal_receiver(session_id, person_id)
    if receiver is None:
        raise ReceiverNotAvailableError
    return {"receiverId": receiver.id, "receiverName": receiver.name}


@router.post("/draws")
def draw(payload: RosterRequest, request: Request) -> dict[str, object]:
    """Run a one-off draw without storing a session."""
    container: AppContainer = request.app.state.container
    pairings = container.session_service.draw(payload.groups(), payload.participants())
    return {"assignments": [_serialize_pairing(pairing) for pairing in pairings]}


def _serialize_session(view: SessionView) -> dict[str, object]:
    return {
        "id": view.id,
        "houses": [{"id": group.id, "name": group.name} for group in view.groups],
        "people": [
            {
                "id": person.id,
                "name": person.name,
                "houseId": person.group_id,
                "claimed": person.claimed,
            }
            for person in view.participants
        ],
        "isDrawComplete": view.complete,
    }


def _serialize_pairing(pairing: Pairing) -> dict[str, str]:
    return {"giverId": pairing.giver_id, "receiverId": pairing.receiver_id}
