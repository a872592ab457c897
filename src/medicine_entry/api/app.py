"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from medicine_entry.api.entries import router as entries_router
from medicine_entry.api.exports import router as exports_router
from medicine_entry.api.models import (
    AuthResponse,
    CredentialsRequest,
    IdentityResponse,
    NotificationResponse,
    SessionResponse,
)
from medicine_entry.app_logging import configure_logging
from medicine_entry.containers import AppContainer
from medicine_entry.domain.auth import AuthResult, Identity
from medicine_entry.services.auth import NotAuthenticatedError
from medicine_entry.services.editing import NotEditingError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        identity = app.state.container.session_manager.load()
        logger.info("Session loaded", extra={"signed_in": identity is not None})
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(entries_router)
    app.include_router(exports_router)

    @app.exception_handler(NotEditingError)
    async def not_editing(_request: Request, exc: NotEditingError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated(
        _request: Request, exc: NotAuthenticatedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/session")
    async def session(request: Request) -> SessionResponse:
        """Return the signed-in user, if any."""
        state_container: AppContainer = request.app.state.container
        identity = state_container.session_manager.current
        if identity is None:
            return SessionResponse()
        return SessionResponse(user=IdentityResponse.from_identity(identity))

    @app.post("/auth/sign-up")
    async def sign_up(
        credentials: CredentialsRequest, request: Request
    ) -> AuthResponse:
        state_container: AppContainer = request.app.state.container
        manager = state_container.session_manager
        result = manager.sign_up(credentials.email, credentials.password)
        return _auth_response(result, manager.current)

    @app.post("/auth/sign-in")
    async def sign_in(
        credentials: CredentialsRequest, request: Request
    ) -> AuthResponse:
        state_container: AppContainer = request.app.state.container
        manager = state_container.session_manager
        result = manager.sign_in(credentials.email, credentials.password)
        return _auth_response(result, manager.current)

    @app.post("/auth/sign-out")
    async def sign_out(request: Request) -> dict[str, str]:
        state_container: AppContainer = request.app.state.container
        state_container.session_manager.sign_out()
        return {"status": "ok"}

    @app.get("/notifications")
    async def notifications(request: Request) -> list[NotificationResponse]:
        """Return notifications that have not been dismissed yet."""
        state_container: AppContainer = request.app.state.container
        return [
            NotificationResponse.from_notification(item)
            for item in state_container.notifications.active()
        ]

    @app.delete("/notifications")
    async def dismiss_notifications(request: Request) -> dict[str, str]:
        """Dismiss every visible notification."""
        state_container: AppContainer = request.app.state.container
        state_container.notifications.clear()
        return {"status": "ok"}

    return app


def _auth_response(
    result: AuthResult, identity: Identity | None
) -> AuthResponse | JSONResponse:
    response = AuthResponse.from_result(result, identity)
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode="json"),
        )
    return response
