import datetime as dt

from fastapi.testclient import TestClient

from apps.api.main import app
from apps.api.routes import reminders as reminders_module
from packages.core.reminders.engine import ReminderEngine
from packages.core.reminders.notifications import NotificationDispatcher
from packages.core.storage.sqlite import SQLiteKeyValueStore


MORNING = dt.datetime(2026, 3, 10, 8, 0)


def _client(monkeypatch, tmp_path, clock=lambda: MORNING, dispatcher=None):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "reminders.db"))
    engine = ReminderEngine(store, dispatcher=dispatcher, clock=clock)
    monkeypatch.setattr(reminders_module, "_engine", lambda: engine)
    return TestClient(app), engine


def test_reminders_crud(monkeypatch, tmp_path):
    client, _ = _client(monkeypatch, tmp_path)

    create_resp = client.post(
        "/reminders",
        json={"medicine_name": "Aspirin", "dosage": "100mg", "time": "13:30", "frequency": "daily"},
    )
    assert create_resp.status_code == 200
    reminder = create_resp.json()
    assert reminder["id"]
    assert reminder["status"] == "upcoming"
    assert reminder["time_display"] == "1:30 PM"
    assert reminder["next_due"] == "2026-03-10T13:30:00"
    assert reminder["next_due_display"] == "Mar 10, 1:30 PM"

    list_resp = client.get("/reminders")
    assert list_resp.status_code == 200
    assert len(list_resp.json()) == 1

    get_resp = client.get(f"/reminders/{reminder['id']}")
    assert get_resp.status_code == 200

    update_resp = client.patch(f"/reminders/{reminder['id']}", json={"dosage": "200mg"})
    assert update_resp.status_code == 200
    assert update_resp.json()["dosage"] == "200mg"
    assert update_resp.json()["medicine_name"] == "Aspirin"

    taken_resp = client.post(f"/reminders/{reminder['id']}/taken")
    assert taken_resp.status_code == 200
    assert taken_resp.json()["status"] == "upcoming"
    assert taken_resp.json()["last_taken"] == "2026-03-10T08:00:00"
    assert taken_resp.json()["next_due"] == "2026-03-11T13:30:00"

    delete_resp = client.delete(f"/reminders/{reminder['id']}")
    assert delete_resp.status_code == 200
    assert client.get(f"/reminders/{reminder['id']}").status_code == 404


def test_reminders_validation_errors(monkeypatch, tmp_path):
    client, engine = _client(monkeypatch, tmp_path)

    bad_time = client.post(
        "/reminders",
        json={"medicine_name": "Aspirin", "dosage": "100mg", "time": "25:00", "frequency": "daily"},
    )
    assert bad_time.status_code == 400

    blank_name = client.post(
        "/reminders",
        json={"medicine_name": "   ", "dosage": "100mg", "time": "09:00", "frequency": "daily"},
    )
    assert blank_name.status_code == 400

    bad_filter = client.get("/reminders", params={"status": "archived"})
    assert bad_filter.status_code == 400
    assert engine.reminders == []


def test_reminders_missing_ids_return_404(monkeypatch, tmp_path):
    client, _ = _client(monkeypatch, tmp_path)

    assert client.get("/reminders/missing").status_code == 404
    assert client.patch("/reminders/missing", json={"dosage": "1"}).status_code == 404
    assert client.post("/reminders/missing/taken").status_code == 404
    assert client.delete("/reminders/missing").status_code == 404


def test_reminders_filter_counts_and_view(monkeypatch, tmp_path):
    client, engine = _client(monkeypatch, tmp_path)
    engine.create("Antibiotic", "1 tablet", "07:00", "once")
    engine.create("Aspirin", "100mg", "09:00", "daily")
    engine.tick()

    missed = client.get("/reminders", params={"status": "missed"}).json()
    assert [item["medicine_name"] for item in missed] == ["Antibiotic"]

    counts = client.get("/reminders/counts").json()
    assert counts == {"all": 2, "upcoming": 1, "taken": 0, "missed": 1}

    view = client.get("/reminders/view", params={"status": "taken"}).json()
    assert view["filter"] == "taken"
    assert view["reminders"] == []
    assert view["empty_message"] == "No reminders marked as taken yet."
    assert view["counts"]["all"] == 2


def test_reminders_resume_runs_cycle_and_collects_alerts(monkeypatch, tmp_path):
    now = {"value": MORNING}
    alerts = []
    dispatcher = NotificationDispatcher(None, fallback_alert=alerts.append)
    client, engine = _client(
        monkeypatch, tmp_path, clock=lambda: now["value"], dispatcher=dispatcher
    )
    once = engine.create("Antibiotic", "1 tablet", "08:30", "once")

    now["value"] = dt.datetime(2026, 3, 10, 8, 29, 30)
    resp = client.post("/reminders/resume")
    assert resp.status_code == 200
    assert resp.json()["changed"] == []
    assert len(alerts) == 1

    now["value"] = dt.datetime(2026, 3, 10, 9, 0)
    resp = client.post("/reminders/resume")
    assert resp.json()["changed"] == [once.id]
    assert resp.json()["counts"]["missed"] == 1


def test_reminders_alert_feed_drains(monkeypatch, tmp_path):
    from apps.api import reminders_scheduler

    client, _ = _client(monkeypatch, tmp_path)
    reminders_scheduler.ALERTS("Medicine Reminder!")

    first = client.get("/reminders/alerts").json()
    assert first == {"alerts": ["Medicine Reminder!"]}
    assert client.get("/reminders/alerts").json() == {"alerts": []}
