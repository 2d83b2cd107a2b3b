from .base import PreferenceStore, ReminderStore
from .sqlite import REMINDERS_KEY, THEME_KEY, SQLiteKeyValueStore

__all__ = [
    "PreferenceStore",
    "ReminderStore",
    "REMINDERS_KEY",
    "THEME_KEY",
    "SQLiteKeyValueStore",
]
