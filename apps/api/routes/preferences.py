from __future__ import annotations

from fastapi import APIRouter, HTTPException

from apps.api import reminders_scheduler
from apps.api.schemas.preferences import ThemeRequest, ThemeResponse
from packages.core.preferences import get_theme, set_theme, toggle_theme
from packages.core.reminders.errors import ValidationError
from packages.core.storage.sqlite import SQLiteKeyValueStore


router = APIRouter(prefix="/preferences", tags=["preferences"])


def _store() -> SQLiteKeyValueStore:
    return SQLiteKeyValueStore(db_path=reminders_scheduler.db_path())


@router.get("/theme", response_model=ThemeResponse)
def read_theme() -> ThemeResponse:
    return ThemeResponse(theme=get_theme(_store()))


@router.put("/theme", response_model=ThemeResponse)
def write_theme(payload: ThemeRequest) -> ThemeResponse:
    try:
        theme = set_theme(_store(), payload.theme)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ThemeResponse(theme=theme)


@router.post("/theme/toggle", response_model=ThemeResponse)
def flip_theme() -> ThemeResponse:
    return ThemeResponse(theme=toggle_theme(_store()))
