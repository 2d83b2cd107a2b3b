from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ReminderCreateRequest(BaseModel):
    medicine_name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    frequency: str = Field(default="daily", min_length=1)


class ReminderUpdateRequest(BaseModel):
    medicine_name: Optional[str] = None
    dosage: Optional[str] = None
    time: Optional[str] = None
    frequency: Optional[str] = None


class ReminderResponse(BaseModel):
    id: str
    medicine_name: str
    dosage: str
    time: str
    time_display: str
    frequency: str
    status: str
    created_at: str
    last_taken: Optional[str]
    last_taken_display: Optional[str]
    next_due: Optional[str]
    next_due_display: Optional[str]


class ReminderCountsResponse(BaseModel):
    all: int
    upcoming: int
    taken: int
    missed: int


class ReminderViewResponse(BaseModel):
    filter: str
    reminders: List[ReminderResponse]
    counts: ReminderCountsResponse
    empty_message: Optional[str]


class ReminderCycleResponse(BaseModel):
    changed: List[str]
    counts: Dict[str, int]
