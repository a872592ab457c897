"""Transient user-facing notifications."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from medicine_entry.domain.outcomes import Notification, NotificationKind

DEFAULT_TTL_SECONDS = 3.0


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class NotificationCenter:
    """Queue of notifications that dismiss themselves after a fixed delay."""

    ttl_seconds: float = DEFAULT_TTL_SECONDS
    clock: Callable[[], datetime] = _utcnow
    _items: list[Notification] = field(default_factory=list)

    def push(self, kind: NotificationKind, message: str) -> Notification:
        """Queue a notification that expires after the configured TTL."""
        now = self.clock()
        notification = Notification(
            kind=kind,
            message=message,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        self._items.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.push("success", message)

    def error(self, message: str) -> Notification:
        return self.push("error", message)

    def active(self) -> list[Notification]:
        """Return notifications that have not expired, oldest first."""
        now = self.clock()
        self._items = [item for item in self._items if now < item.expires_at]
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
