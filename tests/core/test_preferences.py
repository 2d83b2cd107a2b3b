import pytest

from packages.core.preferences import get_theme, set_theme, toggle_theme
from packages.core.reminders.errors import ValidationError
from packages.core.storage.sqlite import THEME_KEY, SQLiteKeyValueStore


def test_theme_defaults_to_light(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    assert get_theme(store) == "light"

    store.set_value(THEME_KEY, "neon")
    assert get_theme(store) == "light"


def test_set_and_toggle_theme(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))

    assert set_theme(store, " Dark ") == "dark"
    assert get_theme(store) == "dark"
    assert toggle_theme(store) == "light"
    assert toggle_theme(store) == "dark"

    with pytest.raises(ValidationError):
        set_theme(store, "sepia")
    assert get_theme(store) == "dark"
