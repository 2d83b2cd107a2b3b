import datetime as dt

from packages.core.reminders.models import Reminder
from packages.core.storage.sqlite import REMINDERS_KEY, SQLiteKeyValueStore


def _reminder(**overrides):
    values = dict(
        id="r1",
        medicine_name="Aspirin",
        dosage="100mg",
        time="09:00",
        frequency="daily",
        status="upcoming",
        created_at=dt.datetime(2026, 3, 10, 8, 0),
        last_taken=dt.datetime(2026, 3, 9, 9, 3),
        next_due=dt.datetime(2026, 3, 10, 9, 0),
        notified_for=dt.datetime(2026, 3, 10, 9, 0),
    )
    values.update(overrides)
    return Reminder(**values)


def test_sqlite_store_saves_and_loads_whole_collection(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "nested" / "reminders.db"))
    assert store.load_reminders() == []

    reminders = [_reminder(), _reminder(id="r2", frequency="once", status="missed", last_taken=None)]
    store.save_reminders(reminders)

    assert store.load_reminders() == reminders

    store.save_reminders(reminders[1:])
    assert [item.id for item in store.load_reminders()] == ["r2"]


def test_sqlite_store_stores_camel_case_records(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    store.save_reminders([_reminder()])

    raw = store.get_value(REMINDERS_KEY)
    assert '"medicineName":"Aspirin"' in raw
    assert '"nextDue":"2026-03-10T09:00:00"' in raw


def test_sqlite_store_corrupt_json_loads_empty(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    store.set_value(REMINDERS_KEY, "{not json")
    assert store.load_reminders() == []


def test_sqlite_store_schema_violation_loads_empty(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    store.set_value(REMINDERS_KEY, '[{"id": "r1", "medicineName": "Aspirin"}]')
    assert store.load_reminders() == []

    store.set_value(
        REMINDERS_KEY,
        '[{"id": "r1", "medicineName": "Aspirin", "dosage": "1", "time": "09:00",'
        ' "frequency": "daily", "status": "taken", "createdAt": "2026-03-10T08:00:00"}]',
    )
    assert store.load_reminders() == []


def test_sqlite_store_values_overwrite(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    assert store.get_value("missing") is None
    store.set_value("k", "one")
    store.set_value("k", "two")
    assert store.get_value("k") == "two"


def test_sqlite_store_duplicate_ids_load_empty(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    store.save_reminders([_reminder(), _reminder(dosage="200mg")])

    assert store.load_reminders() == []
