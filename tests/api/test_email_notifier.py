from apps.api import notifications as notifications_module
from apps.api.notifications import AlertFeed, EmailNotifier
from packages.core.reminders.notifications import DEFAULT_ACTIONS


def test_email_notifier_permission_follows_config(monkeypatch):
    monkeypatch.delenv("SMTP_HOST", raising=False)
    monkeypatch.delenv("SMTP_FROM", raising=False)
    assert EmailNotifier(to_email="me@example.com").permission() == "denied"

    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_FROM", "bot@example.com")
    assert EmailNotifier(to_email="me@example.com").request_permission() == "granted"
    assert EmailNotifier(to_email="").permission() == "denied"


def test_email_notifier_sends_body_with_actions(monkeypatch):
    sent = []
    monkeypatch.setattr(
        notifications_module,
        "send_email",
        lambda to_email, subject, body: sent.append((to_email, subject, body)),
    )

    EmailNotifier(to_email="me@example.com").notify(
        "Medicine Reminder", "Time to take your Aspirin (100mg)", DEFAULT_ACTIONS
    )

    assert sent == [
        (
            "me@example.com",
            "Medicine Reminder",
            "Time to take your Aspirin (100mg)\n\n- Mark as Taken\n- Dismiss",
        )
    ]


def test_alert_feed_is_bounded():
    feed = AlertFeed(maxlen=2)
    feed("one")
    feed("two")
    feed("three")
    assert feed.drain() == ["two", "three"]
    assert feed.drain() == []


def test_send_email_passes_connection_timeout(monkeypatch):
    opened = []

    class FakeSMTP:
        def __init__(self, host, port, timeout=None):
            opened.append((host, port, timeout))
            self.messages = []

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starttls(self):
            pass

        def login(self, user, password):
            pass

        def send_message(self, message):
            self.messages.append(message)

    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_FROM", "bot@example.com")
    monkeypatch.setenv("SMTP_TIMEOUT_SECONDS", "5")
    monkeypatch.delenv("SMTP_PORT", raising=False)
    monkeypatch.setattr(notifications_module.smtplib, "SMTP", FakeSMTP)

    notifications_module.send_email("me@example.com", "Medicine Reminder", "body")

    assert opened == [("smtp.example.com", 587, 5.0)]


def test_send_email_timeout_defaults(monkeypatch):
    monkeypatch.delenv("SMTP_TIMEOUT_SECONDS", raising=False)
    assert notifications_module._smtp_config()["timeout"] == 10.0
