from __future__ import annotations

import logging
import logging.config
import os
import sys
from typing import Any, Dict, Optional


def _log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def _scheduler_log_level() -> str:
    return os.getenv("APSCHEDULER_LOG_LEVEL", "WARNING").upper()


def _log_destination() -> str:
    return os.getenv("LOG_DESTINATION", "stdout").lower()


def _log_file_path() -> Optional[str]:
    return os.getenv("LOG_FILE")


def _handler() -> Dict[str, Any]:
    destination = _log_destination()
    if destination == "file":
        log_file = _log_file_path()
        if not log_file:
            raise RuntimeError("LOG_FILE is required when LOG_DESTINATION=file")
        return {
            "class": "logging.FileHandler",
            "level": _log_level(),
            "filename": log_file,
            "formatter": "standard",
        }
    return {
        "class": "logging.StreamHandler",
        "level": _log_level(),
        "stream": sys.stderr if destination == "stderr" else sys.stdout,
        "formatter": "standard",
    }


def configure_logging() -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {"default": _handler()},
            "loggers": {
                "med_reminders": {"level": _log_level()},
                "apscheduler": {"level": _scheduler_log_level()},
            },
            "root": {"handlers": ["default"], "level": _log_level()},
        }
    )
