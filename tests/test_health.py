from http import HTTPStatus
from unittest import mock

import pytest
from django.db import connection as dj_conn

from tests.factories import seed_rules

pytestmark = pytest.mark.django_db

REDIS_PING = "config.health.redis.Redis.ping"


class DummyDbError(Exception):
    """Synthetic DB error for testing."""


@pytest.fixture
def redis_up():
    with mock.patch(REDIS_PING, return_value=True):
        yield


def test_health_ok_with_seeded_rules(client, redis_up):
    seed_rules()

    resp = client.get("/health/")

    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["status"] == "ok"
    assert data["components"]["broker"]["ok"] is True
    assert data["components"]["rules"]["tardiness_rules"] > 0


def test_health_degraded_without_rules(client, redis_up):
    resp = client.get("/health/")

    assert resp.status_code == HTTPStatus.SERVICE_UNAVAILABLE
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["components"]["rules"]["ok"] is False
    assert "seed_default_rules" in data["components"]["rules"]["error"]


def test_health_degraded_when_broker_unreachable(client, redis_up):
    seed_rules()

    with mock.patch(
        "config.health.celery_app.connection_for_write",
        side_effect=ConnectionRefusedError("broker refused"),
    ):
        resp = client.get("/health/")

    assert resp.status_code == HTTPStatus.SERVICE_UNAVAILABLE
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["components"]["broker"] == {"ok": False, "error": "broker refused"}


def test_health_down_when_db_fails(client, monkeypatch, redis_up):
    msg = "db down"

    def raise_cursor():
        raise DummyDbError(msg)

    monkeypatch.setattr(dj_conn, "cursor", raise_cursor, raising=True)
    resp = client.get("/health/")

    assert resp.status_code == HTTPStatus.SERVICE_UNAVAILABLE
    data = resp.json()
    assert data["status"] == "down"
    assert data["components"]["db"] == {"ok": False, "error": msg}
    assert data["components"]["rules"]["ok"] is False
