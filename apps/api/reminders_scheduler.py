from __future__ import annotations

import logging
import os
from typing import List, Optional

from apps.api.notifications import AlertFeed, EmailNotifier
from packages.core.reminders.engine import DEFAULT_TICK_SECONDS, ReminderEngine
from packages.core.reminders.models import Reminder, ReminderCounts
from packages.core.reminders.notifications import NotificationDispatcher
from packages.core.reminders.scheduler import BackgroundIntervalScheduler
from packages.core.storage.sqlite import SQLiteKeyValueStore


logger = logging.getLogger("med_reminders.runtime")

ALERTS = AlertFeed()

_ENGINE: Optional[ReminderEngine] = None


def db_path() -> str:
    data_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "data"))
    return os.getenv("MEDREM_DB_PATH", os.path.join(data_dir, "reminders.db"))


def _tick_seconds() -> float:
    return float(os.getenv("REMINDERS_TICK_SECONDS", str(DEFAULT_TICK_SECONDS)))


def _dedupe_enabled() -> bool:
    return os.getenv("REMINDERS_NOTIFY_DEDUPE", "true").lower() == "true"


class LoggingListener:
    def on_reminder_list_changed(self, reminders: List[Reminder]) -> None:
        logger.debug("reminder_list_changed count=%s", len(reminders))

    def on_counts_changed(self, counts: ReminderCounts) -> None:
        logger.info(
            "reminder_counts all=%s upcoming=%s taken=%s missed=%s",
            counts.all,
            counts.upcoming,
            counts.taken,
            counts.missed,
        )


def build_engine(store: SQLiteKeyValueStore) -> ReminderEngine:
    engine = ReminderEngine(
        store,
        dispatcher=NotificationDispatcher(EmailNotifier(), fallback_alert=ALERTS),
        listeners=[LoggingListener()],
        dedupe_notifications=_dedupe_enabled(),
    )
    engine.load()
    return engine


def get_engine() -> ReminderEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = build_engine(SQLiteKeyValueStore(db_path=db_path()))
    return _ENGINE


def start_scheduler(engine: ReminderEngine) -> BackgroundIntervalScheduler:
    scheduler = BackgroundIntervalScheduler(job_id="reminders")
    engine.start(scheduler, interval_seconds=_tick_seconds())
    return scheduler
