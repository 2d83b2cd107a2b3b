from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from apscheduler.schedulers.background import BackgroundScheduler


logger = logging.getLogger("med_reminders.scheduler")


class Scheduler(Protocol):
    def every(self, interval_seconds: float, func: Callable[[], None]) -> None:
        """Run ``func`` every ``interval_seconds`` until shutdown."""

    def shutdown(self) -> None:
        """Stop running jobs."""


class BackgroundIntervalScheduler:
    def __init__(self, job_id: str = "reminders") -> None:
        self._job_id = job_id
        self._scheduler: Optional[BackgroundScheduler] = None

    def every(self, interval_seconds: float, func: Callable[[], None]) -> None:
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler()
            self._scheduler.start()
        self._scheduler.add_job(
            func,
            "interval",
            seconds=interval_seconds,
            id=self._job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("scheduler_job_added id=%s interval=%s", self._job_id, interval_seconds)

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None


@dataclass
class _ManualJob:
    interval: dt.timedelta
    func: Callable[[], None]
    next_run: dt.datetime


class ManualScheduler:
    """Scheduler driven by a virtual clock; jobs run only on ``advance``."""

    def __init__(self, start: dt.datetime) -> None:
        self._now = start
        self._jobs: List[_ManualJob] = []

    def now(self) -> dt.datetime:
        return self._now

    def every(self, interval_seconds: float, func: Callable[[], None]) -> None:
        interval = dt.timedelta(seconds=interval_seconds)
        self._jobs.append(_ManualJob(interval=interval, func=func, next_run=self._now + interval))

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running due jobs in time order. Returns runs."""
        target = self._now + dt.timedelta(seconds=seconds)
        runs = 0
        while self._jobs:
            job = min(self._jobs, key=lambda item: item.next_run)
            if job.next_run > target:
                break
            self._now = job.next_run
            job.next_run = job.next_run + job.interval
            job.func()
            runs += 1
        self._now = target
        return runs

    def shutdown(self) -> None:
        self._jobs = []
