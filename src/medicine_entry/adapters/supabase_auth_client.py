"""Supabase Auth adapter."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from supabase import Client

from medicine_entry.domain.auth import Identity
from medicine_entry.services.auth import AuthClient, SessionListener


@dataclass
class SupabaseAuthClient(AuthClient):
    """Email/password authentication through Supabase Auth."""

    client: Client

    def get_session(self) -> Identity | None:
        return _identity(self.client.auth.get_session())

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """Forward auth state events as identities."""

        def _on_change(_event: object, session: Any) -> None:
            callback(_identity(session))

        subscription = self.client.auth.on_auth_state_change(_on_change)
        return subscription.unsubscribe

    def sign_up(self, email: str, password: str) -> Identity | None:
        response = self.client.auth.sign_up({"email": email, "password": password})
        return _identity(response.session)

    def sign_in(self, email: str, password: str) -> Identity | None:
        response = self.client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        return _identity(response.session)

    def sign_out(self) -> None:
        self.client.auth.sign_out()


def _identity(session: Any) -> Identity | None:
    user = getattr(session, "user", None)
    if user is None:
        return None
    return Identity(user_id=UUID(str(user.id)), email=getattr(user, "email", None))
