"""Escalation events handed to the external notification service.

Publishing never raises: delivery problems are logged and the disciplinary
state that produced the event is left untouched.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from dataclasses import dataclass
from typing import Protocol

from django.db import DatabaseError
from django.db import transaction

from hr_discipline.employees.models import Employee
from hr_discipline.notifications.models import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscalationEvent:
    employee_id: int
    rule_name: str
    action_type: str
    trigger_count: int | None
    record_id: int | None = None

    def as_payload(self) -> dict:
        return asdict(self)


class EventPublisher(Protocol):
    def publish(self, event: EscalationEvent) -> None:
        raise NotImplementedError


class DjangoEventPublisher:
    """Store an in-app notification and send the webhook after commit."""

    def publish(self, event: EscalationEvent) -> None:
        try:
            with transaction.atomic():
                notification = self._store(event)
        except DatabaseError:
            logger.exception(
                "Could not store escalation notification for employee %s",
                event.employee_id,
            )
            return
        if notification is None:
            return
        notification_id = notification.pk
        transaction.on_commit(lambda: self._enqueue(notification_id))

    def _store(self, event: EscalationEvent) -> Notification | None:
        user_id = (
            Employee.objects.filter(pk=event.employee_id)
            .values_list("user_id", flat=True)
            .first()
        )
        if user_id is None:
            logger.warning(
                "Escalation event for unknown employee %s", event.employee_id
            )
            return None
        return Notification.objects.create(
            recipient_id=user_id,
            title=f"Disciplinary action: {event.action_type.replace('_', ' ').title()}",
            message=event.rule_name,
            notification_type=Notification.Type.DISCIPLINARY_ACTION,
            payload=event.as_payload(),
            related_link=(
                f"/disciplinary-records/{event.record_id}/" if event.record_id else ""
            ),
        )

    @staticmethod
    def _enqueue(notification_id: int) -> None:
        from hr_discipline.notifications.tasks import deliver_notification  # noqa: PLC0415

        try:
            deliver_notification.delay(notification_id)
        except Exception:  # noqa: BLE001 - delivery is best-effort
            logger.exception(
                "Could not enqueue delivery for notification %s", notification_id
            )
