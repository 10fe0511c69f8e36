"""FastAPI application factory."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gift_exchange.api.sessions import router as sessions_router
from gift_exchange.app_logging import configure_logging
from gift_exchange.config import parse_allowed_origins
from gift_exchange.containers import AppContainer
from gift_exchange.domain.errors import (
    ConflictError,
    GiftExchangeError,
    InfeasibleMatchingError,
    NotFoundError,
    PairingInvariantError,
)

_STATUS_BY_ERROR: tuple[tuple[type[GiftExchangeError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InfeasibleMatchingError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    logger = configure_logging(container.settings.log_level)

    app = FastAPI(title="Gift Exchange API")
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.allowed_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(sessions_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(GiftExchangeError)
    async def handle_domain_error(
        request: Request, exc: GiftExchangeError
    ) -> JSONResponse:
        body: dict[str, str] = {"error": exc.reason}
        message = str(exc)
        if message != exc.reason:
            body["detail"] = message
        return JSONResponse(body, status_code=status_for(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            {"error": "Bad Request"}, status_code=status.HTTP_400_BAD_REQUEST
        )

    @app.exception_handler(PairingInvariantError)
    async def handle_invariant_violation(
        request: Request, exc: PairingInvariantError
    ) -> JSONResponse:
        logger.exception("Pairing invariant violated", exc_info=exc)
        return JSONResponse(
            {"error": "Internal Server Error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return app


def status_for(exc: GiftExchangeError) -> int:
    """Map a domain error to its HTTP status; anything else is a 400."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST

