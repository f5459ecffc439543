from __future__ import annotations

import logging

from celery import shared_task

from hr_discipline.discipline.container import build_discipline_services
from hr_discipline.exceptions import TransientError

logger = logging.getLogger(__name__)


@shared_task(
    name="discipline.process_tardiness",
    autoretry_for=(TransientError,),
    retry_backoff=True,
    retry_backoff_max=300,
    max_retries=8,
)
def process_tardiness(attendance_id: int) -> dict:
    """Replay tardiness processing for one attendance row.

    Safe to run more than once: rows already marked processed are skipped.
    """
    services = build_discipline_services()
    outcome = services.orchestrator.process_tardiness(attendance_id)
    if outcome is None:
        return {"attendance_id": attendance_id, "processed": False}
    return {
        "attendance_id": attendance_id,
        "processed": True,
        "formal_tardies_count": outcome.row.formal_tardies_count,
        "formal_tardies_added": outcome.formal_tardies_added,
    }


@shared_task(name="discipline.sweep")
def sweep() -> dict:
    """Complete expired suspensions and re-run escalation checks."""

    return build_discipline_services().sweep()
