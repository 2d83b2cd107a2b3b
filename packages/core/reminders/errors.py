from __future__ import annotations


class ValidationError(ValueError):
    pass


class ReminderNotFound(LookupError):
    pass
