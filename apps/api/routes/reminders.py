from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from apps.api import reminders_scheduler
from apps.api.schemas.reminders import (
    ReminderCountsResponse,
    ReminderCreateRequest,
    ReminderCycleResponse,
    ReminderResponse,
    ReminderUpdateRequest,
    ReminderViewResponse,
)
from packages.core.reminders.engine import ReminderEngine
from packages.core.reminders.errors import ReminderNotFound, ValidationError
from packages.core.reminders.formatting import (
    EMPTY_STATE_MESSAGES,
    format_date_time,
    format_time_12h,
)
from packages.core.reminders.models import FILTER_ALL, Reminder


router = APIRouter(prefix="/reminders", tags=["reminders"])


def _engine() -> ReminderEngine:
    return reminders_scheduler.get_engine()


def _to_response(reminder: Reminder) -> ReminderResponse:
    return ReminderResponse(
        id=reminder.id,
        medicine_name=reminder.medicine_name,
        dosage=reminder.dosage,
        time=reminder.time,
        time_display=format_time_12h(reminder.time),
        frequency=reminder.frequency,
        status=reminder.status,
        created_at=reminder.created_at.isoformat(),
        last_taken=reminder.last_taken.isoformat() if reminder.last_taken else None,
        last_taken_display=format_date_time(reminder.last_taken) if reminder.last_taken else None,
        next_due=reminder.next_due.isoformat() if reminder.next_due else None,
        next_due_display=format_date_time(reminder.next_due) if reminder.next_due else None,
    )


def _filtered(engine: ReminderEngine, status: str) -> List[Reminder]:
    try:
        return engine.filter_by_status(status)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("", response_model=ReminderResponse)
def create(payload: ReminderCreateRequest) -> ReminderResponse:
    try:
        reminder = _engine().create(
            medicine_name=payload.medicine_name,
            dosage=payload.dosage,
            time=payload.time,
            frequency=payload.frequency,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_response(reminder)


@router.get("", response_model=List[ReminderResponse])
def list_all(status: str = FILTER_ALL) -> List[ReminderResponse]:
    return [_to_response(reminder) for reminder in _filtered(_engine(), status)]


@router.get("/counts", response_model=ReminderCountsResponse)
def counts() -> ReminderCountsResponse:
    return ReminderCountsResponse(**_engine().counts().as_dict())


@router.get("/view", response_model=ReminderViewResponse)
def view(status: str = FILTER_ALL) -> ReminderViewResponse:
    engine = _engine()
    reminders = _filtered(engine, status)
    return ReminderViewResponse(
        filter=status,
        reminders=[_to_response(reminder) for reminder in reminders],
        counts=ReminderCountsResponse(**engine.counts().as_dict()),
        empty_message=None if reminders else EMPTY_STATE_MESSAGES[status],
    )


@router.get("/alerts")
def alerts() -> Dict[str, Any]:
    return {"alerts": reminders_scheduler.ALERTS.drain()}


@router.post("/resume", response_model=ReminderCycleResponse)
def resume() -> ReminderCycleResponse:
    engine = _engine()
    changed = engine.resume()
    return ReminderCycleResponse(
        changed=[reminder.id for reminder in changed],
        counts=engine.counts().as_dict(),
    )


@router.get("/{reminder_id}", response_model=ReminderResponse)
def get(reminder_id: str) -> ReminderResponse:
    try:
        reminder = _engine().require(reminder_id)
    except ReminderNotFound as exc:
        raise HTTPException(status_code=404, detail="Reminder not found") from exc
    return _to_response(reminder)


@router.patch("/{reminder_id}", response_model=ReminderResponse)
def update(reminder_id: str, payload: ReminderUpdateRequest) -> ReminderResponse:
    engine = _engine()
    reminder = engine.get(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    try:
        updated = engine.update(
            reminder_id,
            medicine_name=(
                payload.medicine_name
                if payload.medicine_name is not None
                else reminder.medicine_name
            ),
            dosage=payload.dosage if payload.dosage is not None else reminder.dosage,
            time=payload.time if payload.time is not None else reminder.time,
            frequency=payload.frequency if payload.frequency is not None else reminder.frequency,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if updated is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return _to_response(updated)


@router.post("/{reminder_id}/taken", response_model=ReminderResponse)
def mark_taken(reminder_id: str) -> ReminderResponse:
    updated = _engine().mark_taken(reminder_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return _to_response(updated)


@router.delete("/{reminder_id}")
def delete(reminder_id: str) -> Dict[str, Any]:
    if not _engine().delete(reminder_id):
        raise HTTPException(status_code=404, detail="Reminder not found")
    return {"status": "deleted", "id": reminder_id}
