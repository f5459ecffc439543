import urllib.error

import pytest

from hr_discipline.notifications.events import DjangoEventPublisher
from hr_discipline.notifications.events import EscalationEvent
from hr_discipline.notifications.models import Notification
from hr_discipline.notifications.tasks import deliver_notification
from tests.factories import create_employee

pytestmark = pytest.mark.django_db

WEBHOOK = "https://notify.example.com/hooks/discipline"


@pytest.fixture
def employee():
    return create_employee("ana")


def _event(employee_id, record_id=12):
    return EscalationEvent(
        employee_id=employee_id,
        rule_name="Administrative act for 5 formal tardies",
        action_type="ADMINISTRATIVE_ACT",
        trigger_count=5,
        record_id=record_id,
    )


def _notification(employee):
    return Notification.objects.create(
        recipient=employee.user,
        title="Disciplinary action",
        message="test",
        payload=_event(employee.pk).as_payload(),
    )


def test_publish_stores_and_delivers_after_commit(
    employee, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        DjangoEventPublisher().publish(_event(employee.pk))

    assert len(callbacks) == 1
    notification = Notification.objects.get(recipient=employee.user)
    assert notification.notification_type == Notification.Type.DISCIPLINARY_ACTION
    assert notification.related_link == "/disciplinary-records/12/"
    assert notification.payload["trigger_count"] == 5
    assert notification.delivery_status == Notification.Delivery.SKIPPED


def test_publish_for_unknown_employee_is_dropped():
    DjangoEventPublisher().publish(_event(987654))
    assert not Notification.objects.exists()


def test_delivery_posts_payload(employee, settings, monkeypatch):
    settings.DISCIPLINE_NOTIFICATION_WEBHOOK_URL = WEBHOOK
    sent = []

    def fake_post(url, payload, timeout):
        sent.append((url, payload))
        return 202

    monkeypatch.setattr("hr_discipline.notifications.tasks.post_webhook", fake_post)
    notification = _notification(employee)

    assert deliver_notification(notification.pk) == Notification.Delivery.SENT
    assert sent == [(WEBHOOK, notification.payload)]


@pytest.mark.parametrize(
    "outcome",
    [500, urllib.error.URLError("unreachable"), TimeoutError("slow")],
)
def test_delivery_failure_is_recorded(employee, settings, monkeypatch, outcome):
    settings.DISCIPLINE_NOTIFICATION_WEBHOOK_URL = WEBHOOK

    def fake_post(url, payload, timeout):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr("hr_discipline.notifications.tasks.post_webhook", fake_post)
    notification = _notification(employee)

    assert deliver_notification(notification.pk) == Notification.Delivery.FAILED
    notification.refresh_from_db()
    assert notification.delivery_status == Notification.Delivery.FAILED


def test_delivery_of_missing_notification():
    assert deliver_notification(987654) == "missing"
