from __future__ import annotations

import datetime as dt
from typing import Dict

from .models import FILTER_ALL, STATUS_MISSED, STATUS_TAKEN, STATUS_UPCOMING, Reminder
from .schedule import parse_time_of_day


EMPTY_STATE_MESSAGES: Dict[str, str] = {
    FILTER_ALL: "No reminders found. Add your first medicine reminder above!",
    STATUS_UPCOMING: "No upcoming reminders.",
    STATUS_TAKEN: "No reminders marked as taken yet.",
    STATUS_MISSED: "No missed reminders.",
}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _clock(hour: int, minute: int) -> str:
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"


def format_time_12h(time_value: str) -> str:
    parsed = parse_time_of_day(time_value)
    return _clock(parsed.hour, parsed.minute)


def format_date_time(value: dt.datetime) -> str:
    return f"{_MONTHS[value.month - 1]} {value.day}, {_clock(value.hour, value.minute)}"


def notification_body(reminder: Reminder) -> str:
    return f"Time to take your {reminder.medicine_name} ({reminder.dosage})"


def fallback_message(reminder: Reminder) -> str:
    return (
        "Medicine Reminder!\n\n"
        f"Time to take your {reminder.medicine_name}\n"
        f"Dosage: {reminder.dosage}"
    )
