"""Periodic jobs, owned by an explicit handle.

Importing this module schedules nothing. The process entry point (the
``run_scheduler`` management command) builds a :class:`SchedulerHandle`,
calls :meth:`SchedulerHandle.start` and then runs Celery beat.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from celery import Celery

from hr_discipline import policies

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    task: str
    interval_minutes: int

    @property
    def schedule(self) -> dt.timedelta:
        return dt.timedelta(minutes=self.interval_minutes)


def default_jobs() -> list[ScheduledJob]:
    return [
        ScheduledJob(
            name="attendance-auto-checkout",
            task="attendance.auto_checkout",
            interval_minutes=policies.auto_checkout_interval_minutes(),
        ),
        ScheduledJob(
            name="discipline-sweep",
            task="discipline.sweep",
            interval_minutes=policies.discipline_sweep_interval_minutes(),
        ),
    ]


class SchedulerHandle:
    """Installs and removes this service's beat entries on a Celery app."""

    def __init__(self, app: Celery, jobs: list[ScheduledJob] | None = None):
        self.app = app
        self.jobs = list(jobs) if jobs is not None else default_jobs()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            logger.info("Scheduler already running")
            return
        for job in self.jobs:
            if job.interval_minutes <= 0:
                msg = f"Job {job.name} needs a positive interval"
                raise ValueError(msg)
        schedule = dict(self.app.conf.beat_schedule or {})
        for job in self.jobs:
            schedule[job.name] = {"task": job.task, "schedule": job.schedule}
        self.app.conf.beat_schedule = schedule
        self._running = True
        logger.info(
            "Scheduler started: %s",
            ", ".join(f"{j.task} every {j.interval_minutes}m" for j in self.jobs),
        )

    def stop(self) -> None:
        if not self._running:
            return
        schedule = dict(self.app.conf.beat_schedule or {})
        for job in self.jobs:
            schedule.pop(job.name, None)
        self.app.conf.beat_schedule = schedule
        self._running = False
        logger.info("Scheduler stopped")

    def status(self) -> dict:
        return {
            "running": self._running,
            "timezone": str(policies.attendance_time_zone()),
            "jobs": [
                {
                    "name": job.name,
                    "task": job.task,
                    "interval_minutes": job.interval_minutes,
                    "installed": job.name in (self.app.conf.beat_schedule or {}),
                }
                for job in self.jobs
            ],
        }
