"""Domain models for authentication."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Identity:
    """The authenticated user scoping all data access."""

    user_id: UUID
    email: str | None = None

    @property
    def namespace(self) -> str:
        """Blob path prefix owned by this identity."""
        return str(self.user_id)


@dataclass(frozen=True)
class AuthResult:
    """Result of a sign-up or sign-in attempt."""

    ok: bool
    message: str | None = None
