from .preferences import router as preferences_router
from .reminders import router as reminders_router

__all__ = [
    "preferences_router",
    "reminders_router",
]
