"""Dependency container wiring for the application."""

import random
from dataclasses import dataclass

from gift_exchange.adapters.memory_session_repository import (
    InMemorySessionRepository,
)
from gift_exchange.config import Settings
from gift_exchange.services.matching import MatchingEngine
from gift_exchange.services.sessions import SessionRepository, SessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_repository: SessionRepository
    matching_engine: MatchingEngine
    session_service: SessionService


def build_container(
    settings: Settings | None = None, rng: random.Random | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_repository = InMemorySessionRepository()
    matching_engine = MatchingEngine(
        max_attempts=resolved_settings.max_draw_attempts,
        feasibility_precheck=resolved_settings.feasibility_precheck,
        rng=rng or random.SystemRandom(),
    )
    session_service = SessionService(
        repository=session_repository,
        engine=matching_engine,
        precompute_draw=resolved_settings.precompute_draw,
        session_id_bytes=resolved_settings.session_id_bytes,
    )
    return AppContainer(
        settings=resolved_settings,
        session_repository=session_repository,
        matching_engine=matching_engine,
        session_service=session_service,
    )
