from celery import shared_task

from hr_discipline.discipline.container import build_discipline_services


@shared_task(name="attendance.auto_checkout")
def auto_checkout() -> dict:
    """Close every open session whose shift has ended.

    Returns:
        The sweep report: success flag, processed/skipped/error counts and
        per-record details.
    """
    return build_discipline_services().auto_checkout.run().as_dict()
