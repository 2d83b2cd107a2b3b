from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .formatting import fallback_message, notification_body
from .models import Reminder


logger = logging.getLogger("med_reminders.notifications")

NOTIFICATION_TITLE = "Medicine Reminder"

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"
PERMISSION_DEFAULT = "default"


@dataclass(frozen=True)
class NotificationAction:
    id: str
    label: str


DEFAULT_ACTIONS: Tuple[NotificationAction, ...] = (
    NotificationAction(id="taken", label="Mark as Taken"),
    NotificationAction(id="dismiss", label="Dismiss"),
)


@runtime_checkable
class Notifier(Protocol):
    def permission(self) -> str:
        """Return "granted", "denied" or "default"."""

    def request_permission(self) -> str:
        """Ask for permission and return the resulting state."""

    def notify(self, title: str, body: str, actions: Sequence[NotificationAction]) -> None:
        """Deliver a notification. Raises on delivery failure."""


class NotificationDispatcher:
    """Routes reminder notifications to a notifier or to the fallback alert."""

    def __init__(
        self,
        notifier: Optional[Notifier],
        fallback_alert: Callable[[str], None],
    ) -> None:
        self._notifier = notifier
        self._fallback_alert = fallback_alert

    def ensure_permission(self) -> str:
        if self._notifier is None:
            return PERMISSION_DENIED
        try:
            state = self._notifier.permission()
            if state == PERMISSION_DEFAULT:
                state = self._notifier.request_permission()
        except Exception as exc:
            logger.warning("notification_permission_failed error=%s", exc)
            return PERMISSION_DENIED
        return state

    def send(self, reminder: Reminder) -> bool:
        if self._notifier is not None and self._permission() == PERMISSION_GRANTED:
            try:
                self._notifier.notify(
                    NOTIFICATION_TITLE, notification_body(reminder), DEFAULT_ACTIONS
                )
                return True
            except Exception as exc:
                logger.warning("notification_failed id=%s error=%s", reminder.id, exc)
        self._fallback_alert(fallback_message(reminder))
        return False

    def _permission(self) -> str:
        try:
            return self._notifier.permission()
        except Exception as exc:
            logger.warning("notification_permission_failed error=%s", exc)
            return PERMISSION_DENIED
