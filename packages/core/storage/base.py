from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from packages.core.reminders.models import Reminder


@runtime_checkable
class ReminderStore(Protocol):
    def load_reminders(self) -> List["Reminder"]:
        """Return the whole collection. Corrupt data loads as empty."""

    def save_reminders(self, reminders: List["Reminder"]) -> None:
        """Replace the whole stored collection."""


@runtime_checkable
class PreferenceStore(Protocol):
    def get_value(self, key: str) -> Optional[str]:
        """Return the raw value for a key, or None if missing."""

    def set_value(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
