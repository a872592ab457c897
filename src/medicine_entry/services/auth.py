"""Session mirror over the external auth provider."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from medicine_entry.domain.auth import AuthResult, Identity
from medicine_entry.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)

SessionListener = Callable[[Identity | None], None]


class NotAuthenticatedError(RuntimeError):
    """Raised when an operation needs a signed-in user."""


class AuthClient(Protocol):
    """Interface for the authentication provider."""

    def get_session(self) -> Identity | None:
        """Return the identity of the current session, if any."""

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """Register for session changes and return an unsubscribe callable."""

    def sign_up(self, email: str, password: str) -> Identity | None:
        """Create an account; returns the identity when a session started."""

    def sign_in(self, email: str, password: str) -> Identity | None:
        """Sign in with a password."""

    def sign_out(self) -> None:
        """End the current session."""


@dataclass
class SessionManager:
    """Holds the current identity and forwards provider session changes."""

    client: AuthClient
    notifications: NotificationCenter
    current: Identity | None = None
    _listeners: list[SessionListener] = field(default_factory=list)
    _unsubscribe: Callable[[], None] | None = None

    def __post_init__(self) -> None:
        self._unsubscribe = self.client.on_session_change(self._apply)

    def load(self) -> Identity | None:
        """Read the provider's current session into the mirror."""
        try:
            identity = self.client.get_session()
        except Exception:
            logger.exception("Failed to read auth session")
            identity = None
        self._apply(identity)
        return self.current

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def require(self) -> Identity:
        if self.current is None:
            raise NotAuthenticatedError("Sign in required")
        return self.current

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Create an account and sign in when the provider allows it."""
        try:
            identity = self.client.sign_up(email, password)
        except Exception as exc:
            return self._auth_failure("Sign up failed", exc)
        if identity is None:
            return AuthResult(ok=True, message="Check your email to confirm.")
        self._apply(identity)
        return AuthResult(ok=True)

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            identity = self.client.sign_in(email, password)
        except Exception as exc:
            return self._auth_failure("Sign in failed", exc)
        self._apply(identity)
        return AuthResult(ok=True)

    def sign_out(self) -> None:
        try:
            self.client.sign_out()
        except Exception:
            logger.exception("Sign out failed")
            self.notifications.error("Sign out failed.")
            return
        self._apply(None)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _apply(self, identity: Identity | None) -> None:
        if identity == self.current:
            return
        self.current = identity
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception:
                logger.exception("Session listener failed")

    def _auth_failure(self, action: str, exc: Exception) -> AuthResult:
        logger.exception(action)
        message = str(exc) or action
        self.notifications.error(message)
        return AuthResult(ok=False, message=message)
