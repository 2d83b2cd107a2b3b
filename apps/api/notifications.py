from __future__ import annotations

import logging
import os
import smtplib
import threading
from collections import deque
from email.message import EmailMessage
from typing import Deque, List, Optional, Sequence

from packages.core.reminders.notifications import (
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    NotificationAction,
)


logger = logging.getLogger("med_reminders.alerts")


def _smtp_config() -> dict:
    return {
        "host": os.getenv("SMTP_HOST", ""),
        "port": int(os.getenv("SMTP_PORT", "587")),
        "user": os.getenv("SMTP_USER", ""),
        "password": os.getenv("SMTP_PASSWORD", ""),
        "from_email": os.getenv("SMTP_FROM", ""),
        "use_tls": os.getenv("SMTP_USE_TLS", "true").lower() == "true",
        "timeout": float(os.getenv("SMTP_TIMEOUT_SECONDS", "10")),
    }


def send_email(to_email: str, subject: str, body: str) -> None:
    config = _smtp_config()
    if not config["host"] or not config["from_email"]:
        raise RuntimeError("SMTP is not configured. Set SMTP_HOST and SMTP_FROM.")

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = config["from_email"]
    message["To"] = to_email
    message.set_content(body)

    with smtplib.SMTP(config["host"], config["port"], timeout=config["timeout"]) as server:
        if config["use_tls"]:
            server.starttls()
        if config["user"]:
            server.login(config["user"], config["password"])
        server.send_message(message)


class EmailNotifier:
    """Delivers reminder notifications by e-mail.

    Permission is granted only when SMTP and a recipient are configured.
    """

    def __init__(self, to_email: Optional[str] = None) -> None:
        self._to_email = to_email if to_email is not None else os.getenv("REMINDERS_NOTIFY_EMAIL", "")

    def permission(self) -> str:
        config = _smtp_config()
        if self._to_email and config["host"] and config["from_email"]:
            return PERMISSION_GRANTED
        return PERMISSION_DENIED

    def request_permission(self) -> str:
        return self.permission()

    def notify(self, title: str, body: str, actions: Sequence[NotificationAction]) -> None:
        lines = [body, ""]
        lines.extend(f"- {action.label}" for action in actions)
        send_email(self._to_email, title, "\n".join(lines))


class AlertFeed:
    def __init__(self, maxlen: int = 100) -> None:
        self._alerts: Deque[str] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def __call__(self, message: str) -> None:
        logger.warning("fallback_alert message=%r", message)
        with self._lock:
            self._alerts.append(message)

    def drain(self) -> List[str]:
        with self._lock:
            alerts = list(self._alerts)
            self._alerts.clear()
            return alerts
