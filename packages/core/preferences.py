from __future__ import annotations

from typing import Tuple

from packages.core.reminders.errors import ValidationError
from packages.core.storage.base import PreferenceStore
from packages.core.storage.sqlite import THEME_KEY


THEME_LIGHT = "light"
THEME_DARK = "dark"
THEMES: Tuple[str, ...] = (THEME_LIGHT, THEME_DARK)


def get_theme(store: PreferenceStore) -> str:
    value = store.get_value(THEME_KEY)
    if value not in THEMES:
        return THEME_LIGHT
    return value


def set_theme(store: PreferenceStore, theme: str) -> str:
    theme = (theme or "").strip().lower()
    if theme not in THEMES:
        raise ValidationError(f"invalid_theme: {theme!r}")
    store.set_value(THEME_KEY, theme)
    return theme


def toggle_theme(store: PreferenceStore) -> str:
    current = get_theme(store)
    return set_theme(store, THEME_LIGHT if current == THEME_DARK else THEME_DARK)
