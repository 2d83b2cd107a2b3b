from __future__ import annotations

import datetime as dt
import logging
import threading
import uuid
from contextlib import nullcontext
from typing import Callable, Iterable, List, Optional, Protocol

try:
    from opentelemetry import trace
except Exception:  # pragma: no cover - optional dependency resolution
    trace = None

from packages.core.storage.base import ReminderStore

from .errors import ReminderNotFound, ValidationError
from .models import (
    FILTER_ALL,
    FILTERS,
    FREQUENCY_DAILY,
    FREQUENCY_ONCE,
    STATUS_MISSED,
    STATUS_TAKEN,
    STATUS_UPCOMING,
    Reminder,
    ReminderCounts,
)
from .notifications import NotificationDispatcher
from .scheduler import Scheduler
from .schedule import (
    compute_next_due,
    is_past_grace,
    next_due_after_taken,
    normalize_frequency,
    normalize_time,
    parse_time_of_day,
    should_notify,
)


logger = logging.getLogger("med_reminders.engine")

DEFAULT_TICK_SECONDS = 60


class ReminderListener(Protocol):
    def on_reminder_list_changed(self, reminders: List[Reminder]) -> None:
        """Called with the full collection after it changed."""

    def on_counts_changed(self, counts: ReminderCounts) -> None:
        """Called with fresh per-status counts after the collection changed."""


def _required_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field}_required")
    return cleaned


class ReminderEngine:
    """Owns the reminder collection and every time-driven transition on it.

    The collection is kept in insertion order and written back to the store
    as a whole after each change; a failed write leaves the collection as it
    was. Every read and mutation takes the engine lock, so scheduler
    callbacks and request handlers never interleave. Notification delivery
    runs outside the lock.
    """

    def __init__(
        self,
        store: ReminderStore,
        dispatcher: Optional[NotificationDispatcher] = None,
        listeners: Optional[Iterable[ReminderListener]] = None,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
        dedupe_notifications: bool = True,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._listeners: List[ReminderListener] = list(listeners or [])
        self._clock = clock
        self._dedupe = dedupe_notifications
        self._reminders: List[Reminder] = []
        self._scheduler: Optional[Scheduler] = None
        self._lock = threading.RLock()
        self._tracer = trace.get_tracer("med_reminders.engine") if trace else None

    @property
    def reminders(self) -> List[Reminder]:
        with self._lock:
            return list(self._reminders)

    def add_listener(self, listener: ReminderListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def load(self) -> List[Reminder]:
        with self._lock:
            self._reminders = list(self._store.load_reminders())
            logger.info("reminders_loaded count=%s", len(self._reminders))
            return list(self._reminders)

    def get(self, reminder_id: str) -> Optional[Reminder]:
        with self._lock:
            index = self._index_of(reminder_id)
            return self._reminders[index] if index is not None else None

    def require(self, reminder_id: str) -> Reminder:
        reminder = self.get(reminder_id)
        if reminder is None:
            raise ReminderNotFound(reminder_id)
        return reminder

    def create(
        self,
        medicine_name: str,
        dosage: str,
        time: str,
        frequency: str,
        now: Optional[dt.datetime] = None,
    ) -> Reminder:
        medicine_name = _required_text(medicine_name, "medicine_name")
        dosage = _required_text(dosage, "dosage")
        time = normalize_time(time)
        frequency = normalize_frequency(frequency)
        with self._lock:
            now = now or self._clock()
            reminder = Reminder(
                id=str(uuid.uuid4()),
                medicine_name=medicine_name,
                dosage=dosage,
                time=time,
                frequency=frequency,
                status=STATUS_UPCOMING,
                created_at=now,
                last_taken=None,
                next_due=compute_next_due(parse_time_of_day(time), frequency, now),
            )
            previous = list(self._reminders)
            self._reminders.append(reminder)
            self._commit(previous)
            logger.info("reminder_created id=%s frequency=%s", reminder.id, frequency)
            return reminder

    def update(
        self,
        reminder_id: str,
        medicine_name: str,
        dosage: str,
        time: str,
        frequency: str,
        now: Optional[dt.datetime] = None,
    ) -> Optional[Reminder]:
        medicine_name = _required_text(medicine_name, "medicine_name")
        dosage = _required_text(dosage, "dosage")
        time = normalize_time(time)
        frequency = normalize_frequency(frequency)
        with self._lock:
            index = self._index_of(reminder_id)
            if index is None:
                logger.info("reminder_update_skipped id=%s reason=not_found", reminder_id)
                return None
            now = now or self._clock()
            current = self._reminders[index]
            status = current.status
            if frequency == FREQUENCY_DAILY:
                status = STATUS_UPCOMING
            updated = Reminder(
                **{
                    **current.__dict__,
                    "medicine_name": medicine_name,
                    "dosage": dosage,
                    "time": time,
                    "frequency": frequency,
                    "next_due": compute_next_due(parse_time_of_day(time), frequency, now),
                    "status": status,
                }
            )
            previous = list(self._reminders)
            self._reminders[index] = updated
            self._commit(previous)
            logger.info("reminder_updated id=%s", reminder_id)
            return updated

    def delete(self, reminder_id: str) -> bool:
        with self._lock:
            index = self._index_of(reminder_id)
            if index is None:
                logger.info("reminder_delete_skipped id=%s reason=not_found", reminder_id)
                return False
            previous = list(self._reminders)
            del self._reminders[index]
            self._commit(previous)
            logger.info("reminder_deleted id=%s", reminder_id)
            return True

    def mark_taken(self, reminder_id: str, now: Optional[dt.datetime] = None) -> Optional[Reminder]:
        with self._lock:
            index = self._index_of(reminder_id)
            if index is None:
                logger.info("reminder_taken_skipped id=%s reason=not_found", reminder_id)
                return None
            reminder = self._reminders[index]
            if reminder.frequency == FREQUENCY_ONCE and reminder.status != STATUS_UPCOMING:
                logger.info(
                    "reminder_taken_skipped id=%s reason=terminal status=%s",
                    reminder_id,
                    reminder.status,
                )
                return reminder
            now = now or self._clock()
            changes = {"status": STATUS_TAKEN, "last_taken": now}
            if reminder.frequency == FREQUENCY_DAILY:
                changes["next_due"] = next_due_after_taken(
                    parse_time_of_day(reminder.time), now, reminder.next_due
                )
                changes["status"] = STATUS_UPCOMING
            updated = Reminder(**{**reminder.__dict__, **changes})
            previous = list(self._reminders)
            self._reminders[index] = updated
            self._commit(previous)
            logger.info("reminder_taken id=%s status=%s", reminder_id, updated.status)
            return updated

    def tick(self, now: Optional[dt.datetime] = None) -> List[Reminder]:
        """Advance reminders whose grace window has elapsed.

        One-time reminders become missed. Daily reminders stay upcoming and
        are re-armed for their next occurrence. Returns the changed reminders.
        """
        with self._lock:
            now = now or self._clock()
            previous = list(self._reminders)
            changed: List[Reminder] = []
            for index, reminder in enumerate(self._reminders):
                if reminder.status != STATUS_UPCOMING or not is_past_grace(reminder, now):
                    continue
                if reminder.frequency == FREQUENCY_ONCE:
                    updated = Reminder(**{**reminder.__dict__, "status": STATUS_MISSED})
                    logger.info("reminder_missed id=%s", reminder.id)
                else:
                    next_due = compute_next_due(
                        parse_time_of_day(reminder.time), FREQUENCY_DAILY, now
                    )
                    updated = Reminder(**{**reminder.__dict__, "next_due": next_due})
                    logger.info(
                        "reminder_rearmed id=%s next_due=%s", reminder.id, next_due.isoformat()
                    )
                self._reminders[index] = updated
                changed.append(updated)
            if changed:
                self._commit(previous)
            return changed

    def check_notifications(self, now: Optional[dt.datetime] = None) -> List[Reminder]:
        """Notify reminders entering their due window.

        Due reminders are picked and marked under the lock; delivery happens
        after it is released so a slow notifier never blocks other callers.
        """
        with self._lock:
            now = now or self._clock()
            previous = list(self._reminders)
            notified: List[Reminder] = []
            for index, reminder in enumerate(self._reminders):
                if not should_notify(reminder, now):
                    continue
                if self._dedupe and reminder.notified_for == reminder.next_due:
                    continue
                if self._dedupe:
                    reminder = Reminder(**{**reminder.__dict__, "notified_for": reminder.next_due})
                    self._reminders[index] = reminder
                notified.append(reminder)
            if notified and self._dedupe:
                self._save(previous)
        for reminder in notified:
            if self._dispatcher is not None:
                self._dispatcher.send(reminder)
            logger.info("reminder_notified id=%s", reminder.id)
        return notified

    def run_cycle(self, now: Optional[dt.datetime] = None) -> List[Reminder]:
        span_context = (
            self._tracer.start_as_current_span("reminders.cycle")
            if self._tracer
            else nullcontext()
        )
        with span_context:
            now = now or self._clock()
            notified = self.check_notifications(now)
            changed = self.tick(now)
            logger.debug("reminders_cycle notified=%s changed=%s", len(notified), len(changed))
            return changed

    def resume(self, now: Optional[dt.datetime] = None) -> List[Reminder]:
        logger.info("reminders_resume")
        return self.run_cycle(now)

    def start(self, scheduler: Scheduler, interval_seconds: float = DEFAULT_TICK_SECONDS) -> None:
        if self._dispatcher is not None:
            permission = self._dispatcher.ensure_permission()
            logger.info("notification_permission state=%s", permission)
        self.run_cycle()
        scheduler.every(interval_seconds, self._scheduled_cycle)
        self._scheduler = scheduler

    def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown()
        self._scheduler = None

    def filter_by_status(self, status: str) -> List[Reminder]:
        if status not in FILTERS:
            raise ValidationError(f"invalid_status: {status!r}")
        with self._lock:
            if status == FILTER_ALL:
                return list(self._reminders)
            return [reminder for reminder in self._reminders if reminder.status == status]

    def counts(self) -> ReminderCounts:
        with self._lock:
            statuses = [reminder.status for reminder in self._reminders]
            return ReminderCounts(
                all=len(statuses),
                upcoming=statuses.count(STATUS_UPCOMING),
                taken=statuses.count(STATUS_TAKEN),
                missed=statuses.count(STATUS_MISSED),
            )

    def _scheduled_cycle(self) -> None:
        try:
            self.run_cycle()
        except Exception as exc:
            logger.exception("reminders_cycle_failed error=%s", exc)

    def _index_of(self, reminder_id: str) -> Optional[int]:
        for index, reminder in enumerate(self._reminders):
            if reminder.id == reminder_id:
                return index
        return None

    def _save(self, previous: List[Reminder]) -> None:
        # A failed write restores the collection to what the store still holds.
        try:
            self._store.save_reminders(self._reminders)
        except Exception:
            self._reminders = previous
            raise

    def _commit(self, previous: List[Reminder]) -> None:
        self._save(previous)
        reminders = list(self._reminders)
        counts = self.counts()
        for listener in self._listeners:
            try:
                listener.on_reminder_list_changed(reminders)
            except Exception as exc:
                logger.exception("reminder_listener_failed callback=list error=%s", exc)
            try:
                listener.on_counts_changed(counts)
            except Exception as exc:
                logger.exception("reminder_listener_failed callback=counts error=%s", exc)
