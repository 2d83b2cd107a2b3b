from .models import Reminder, ReminderCounts
from .errors import ReminderNotFound, ValidationError
from .schedule import GRACE_WINDOW, NOTIFY_WINDOW, compute_next_due, should_notify
from .records import ReminderRecord
from .notifications import NotificationAction, NotificationDispatcher, Notifier
from .scheduler import BackgroundIntervalScheduler, ManualScheduler, Scheduler
from .engine import ReminderEngine, ReminderListener

__all__ = [
    "GRACE_WINDOW",
    "NOTIFY_WINDOW",
    "BackgroundIntervalScheduler",
    "ManualScheduler",
    "NotificationAction",
    "NotificationDispatcher",
    "Notifier",
    "Reminder",
    "ReminderCounts",
    "ReminderEngine",
    "ReminderListener",
    "ReminderNotFound",
    "ReminderRecord",
    "Scheduler",
    "ValidationError",
    "compute_next_due",
    "should_notify",
]
