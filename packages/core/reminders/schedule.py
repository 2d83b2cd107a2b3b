from __future__ import annotations

import datetime as dt
import re
from typing import Optional

from .errors import ValidationError
from .models import FREQUENCIES, FREQUENCY_DAILY, STATUS_UPCOMING, Reminder


GRACE_WINDOW = dt.timedelta(minutes=15)
NOTIFY_WINDOW = dt.timedelta(seconds=60)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(value: str) -> dt.time:
    """Parse ``H:MM`` / ``HH:MM`` into a time. Raises ValidationError."""
    match = _TIME_RE.match((value or "").strip())
    if match is None:
        raise ValidationError(f"invalid_time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"invalid_time: {value!r}")
    return dt.time(hour=hours, minute=minutes)


def normalize_time(value: str) -> str:
    parsed = parse_time_of_day(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def normalize_frequency(value: str) -> str:
    frequency = (value or "").strip().lower()
    if frequency not in FREQUENCIES:
        raise ValidationError(f"invalid_frequency: {value!r}")
    return frequency


def compute_next_due(time_of_day: dt.time, frequency: str, now: dt.datetime) -> dt.datetime:
    """Next occurrence of ``time_of_day`` relative to ``now``.

    Today's instant is returned unless it is not strictly after ``now`` and
    the reminder is daily, in which case the same time tomorrow is returned.
    One-time reminders always get today's instant, even when already past.
    """
    due = dt.datetime.combine(now.date(), time_of_day.replace(second=0, microsecond=0))
    if now.tzinfo is not None:
        due = due.replace(tzinfo=now.tzinfo)
    if due <= now and frequency == FREQUENCY_DAILY:
        due = dt.datetime.combine(now.date() + dt.timedelta(days=1), due.timetz())
    return due


def next_due_after_taken(
    time_of_day: dt.time, now: dt.datetime, previous_due: Optional[dt.datetime]
) -> dt.datetime:
    # Taking a dose early must not leave the same occurrence armed.
    due = compute_next_due(time_of_day, FREQUENCY_DAILY, now)
    if previous_due is not None and due <= previous_due:
        due = dt.datetime.combine(previous_due.date() + dt.timedelta(days=1), due.timetz())
    return due


def is_past_grace(reminder: Reminder, now: dt.datetime) -> bool:
    if reminder.next_due is None:
        return False
    return now > reminder.next_due + GRACE_WINDOW


def should_notify(reminder: Reminder, now: dt.datetime) -> bool:
    if reminder.status != STATUS_UPCOMING or reminder.next_due is None:
        return False
    remaining = reminder.next_due - now
    return dt.timedelta(0) < remaining <= NOTIFY_WINDOW
