import datetime as dt

import pytest
from celery import Celery

from hr_discipline.scheduling import ScheduledJob
from hr_discipline.scheduling import SchedulerHandle
from hr_discipline.scheduling import default_jobs


@pytest.fixture
def app():
    return Celery("scheduling-test")


def test_default_jobs_follow_settings(settings):
    settings.AUTO_CHECKOUT_INTERVAL_MINUTES = 15
    settings.DISCIPLINE_SWEEP_INTERVAL_MINUTES = 120
    jobs = {job.task: job for job in default_jobs()}
    assert jobs["attendance.auto_checkout"].schedule == dt.timedelta(minutes=15)
    assert jobs["discipline.sweep"].schedule == dt.timedelta(hours=2)


def test_nothing_is_installed_before_start(app):
    handle = SchedulerHandle(app)
    assert not handle.running
    assert not app.conf.beat_schedule
    assert all(not job["installed"] for job in handle.status()["jobs"])


def test_start_and_stop(app):
    app.conf.beat_schedule = {"other": {"task": "x", "schedule": 60}}
    handle = SchedulerHandle(app)

    handle.start()
    handle.start()
    assert handle.running
    assert set(app.conf.beat_schedule) == {
        "other",
        "attendance-auto-checkout",
        "discipline-sweep",
    }
    assert all(job["installed"] for job in handle.status()["jobs"])

    handle.stop()
    assert not handle.running
    assert set(app.conf.beat_schedule) == {"other"}


def test_invalid_interval_is_rejected(app):
    handle = SchedulerHandle(app, [ScheduledJob("broken", "discipline.sweep", 0)])
    with pytest.raises(ValueError, match="positive interval"):
        handle.start()
    assert not handle.running
    assert "broken" not in (app.conf.beat_schedule or {})
