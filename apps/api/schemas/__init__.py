from .preferences import ThemeRequest, ThemeResponse
from .reminders import (
    ReminderCountsResponse,
    ReminderCreateRequest,
    ReminderCycleResponse,
    ReminderResponse,
    ReminderUpdateRequest,
    ReminderViewResponse,
)

__all__ = [
    "ReminderCountsResponse",
    "ReminderCreateRequest",
    "ReminderCycleResponse",
    "ReminderResponse",
    "ReminderUpdateRequest",
    "ReminderViewResponse",
    "ThemeRequest",
    "ThemeResponse",
]
