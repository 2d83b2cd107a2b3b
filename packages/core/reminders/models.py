from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Tuple


FREQUENCY_ONCE = "once"
FREQUENCY_DAILY = "daily"
FREQUENCIES: Tuple[str, ...] = (FREQUENCY_ONCE, FREQUENCY_DAILY)

STATUS_UPCOMING = "upcoming"
STATUS_TAKEN = "taken"
STATUS_MISSED = "missed"
STATUSES: Tuple[str, ...] = (STATUS_UPCOMING, STATUS_TAKEN, STATUS_MISSED)

FILTER_ALL = "all"
FILTERS: Tuple[str, ...] = (FILTER_ALL,) + STATUSES


@dataclass(frozen=True)
class Reminder:
    id: str
    medicine_name: str
    dosage: str
    time: str
    frequency: str
    status: str
    created_at: dt.datetime
    last_taken: Optional[dt.datetime]
    next_due: Optional[dt.datetime]
    notified_for: Optional[dt.datetime] = None


@dataclass(frozen=True)
class ReminderCounts:
    all: int
    upcoming: int
    taken: int
    missed: int

    def as_dict(self) -> dict:
        return {
            "all": self.all,
            "upcoming": self.upcoming,
            "taken": self.taken,
            "missed": self.missed,
        }
