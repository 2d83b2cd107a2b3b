from __future__ import annotations

import datetime as dt
from typing import Annotated, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from .models import Reminder
from .schedule import normalize_time


class ReminderRecord(BaseModel):
    """Persisted shape of a reminder. Keys match the stored JSON blob."""

    id: str = Field(..., min_length=1)
    medicineName: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    time: str
    frequency: Literal["once", "daily"]
    status: Literal["upcoming", "taken", "missed"]
    createdAt: dt.datetime
    lastTaken: Optional[dt.datetime] = None
    nextDue: Optional[dt.datetime] = None
    notifiedFor: Optional[dt.datetime] = None

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        return normalize_time(value)

    @model_validator(mode="after")
    def _check_taken(self) -> "ReminderRecord":
        if self.status == "taken" and self.lastTaken is None:
            raise ValueError("taken reminder without lastTaken")
        return self

    @classmethod
    def from_reminder(cls, reminder: Reminder) -> "ReminderRecord":
        return cls(
            id=reminder.id,
            medicineName=reminder.medicine_name,
            dosage=reminder.dosage,
            time=reminder.time,
            frequency=reminder.frequency,
            status=reminder.status,
            createdAt=reminder.created_at,
            lastTaken=reminder.last_taken,
            nextDue=reminder.next_due,
            notifiedFor=reminder.notified_for,
        )

    def to_reminder(self) -> Reminder:
        return Reminder(
            id=self.id,
            medicine_name=self.medicineName,
            dosage=self.dosage,
            time=self.time,
            frequency=self.frequency,
            status=self.status,
            created_at=self.createdAt,
            last_taken=self.lastTaken,
            next_due=self.nextDue,
            notified_for=self.notifiedFor,
        )


def _unique_ids(records: List[ReminderRecord]) -> List[ReminderRecord]:
    seen = set()
    for record in records:
        if record.id in seen:
            raise ValueError(f"duplicate reminder id {record.id!r}")
        seen.add(record.id)
    return records


_RECORDS = TypeAdapter(Annotated[List[ReminderRecord], AfterValidator(_unique_ids)])


def dump_reminders(reminders: List[Reminder]) -> str:
    records = [ReminderRecord.from_reminder(reminder) for reminder in reminders]
    return _RECORDS.dump_json(records).decode("utf-8")


def load_reminders(payload: str) -> List[Reminder]:
    """Decode a stored blob. Raises pydantic.ValidationError on bad data."""
    return [record.to_reminder() for record in _RECORDS.validate_json(payload)]
