from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request

from celery import shared_task

from hr_discipline import policies
from hr_discipline.notifications.models import Notification

logger = logging.getLogger(__name__)


def post_webhook(url: str, payload: dict, timeout: float) -> int:
    """POST ``payload`` as JSON; returns the HTTP status code."""

    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(  # noqa: S310 - external URL by config
        url,
        data=data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:  # noqa: S310 - external URL by config
        return resp.status


@shared_task(name="notifications.deliver")
def deliver_notification(notification_id: int) -> str:
    """Send one stored escalation event to the external notification service.

    Returns the resulting delivery status. Failures are recorded on the row and
    logged, never raised.
    """
    notification = Notification.objects.filter(pk=notification_id).first()
    if notification is None:
        logger.warning("Notification %s vanished before delivery", notification_id)
        return "missing"

    url = policies.notification_webhook_url()
    if not url:
        status = Notification.Delivery.SKIPPED
    else:
        try:
            code = post_webhook(
                url, notification.payload, policies.notification_timeout_seconds()
            )
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            logger.warning(
                "Notification %s delivery failed: %s", notification_id, exc
            )
            status = Notification.Delivery.FAILED
        else:
            status = (
                Notification.Delivery.SENT
                if 200 <= code < 300
                else Notification.Delivery.FAILED
            )
    notification.delivery_status = status
    notification.save(update_fields=["delivery_status"])
    return status
