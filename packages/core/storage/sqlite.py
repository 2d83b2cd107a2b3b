from __future__ import annotations

import datetime as dt
import logging
import os
import sqlite3
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from packages.core.reminders.models import Reminder
from packages.core.reminders.records import dump_reminders, load_reminders

from .base import PreferenceStore, ReminderStore


REMINDERS_KEY = "medicine-reminders"
THEME_KEY = "medicine-reminder-theme"

logger = logging.getLogger("med_reminders.storage")


class SQLiteKeyValueStore(ReminderStore, PreferenceStore):
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def get_value(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            if row is None:
                return None
            return row[0]

    def set_value(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, dt.datetime.now().isoformat()),
            )

    def load_reminders(self) -> List[Reminder]:
        raw = self.get_value(REMINDERS_KEY)
        if not raw:
            return []
        try:
            return load_reminders(raw)
        except SchemaError as exc:
            logger.warning(
                "reminders_load_failed key=%s errors=%s", REMINDERS_KEY, exc.error_count()
            )
            return []

    def save_reminders(self, reminders: List[Reminder]) -> None:
        self.set_value(REMINDERS_KEY, dump_reminders(reminders))
