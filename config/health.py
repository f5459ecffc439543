"""Liveness of what tardiness processing needs: storage, broker and rules.

The database is required for every check-in, so losing it reports ``down``.
Anything else only degrades the service: check-ins are still recorded, but
retries, sweeps or escalation cannot run.
"""

from __future__ import annotations

from typing import Any

import redis
from django.conf import settings
from django.db import connection
from django.db import transaction
from django.http import JsonResponse

from config.celery_app import app as celery_app
from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import TardinessRule

PROBE_TIMEOUT_SECONDS = 0.5


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True}


def check_redis() -> dict[str, Any]:
    url = getattr(settings, "REDIS_URL", None)
    if not url:
        return {"ok": False, "error": "REDIS_URL not configured"}
    try:
        client = redis.Redis.from_url(
            url,
            socket_timeout=PROBE_TIMEOUT_SECONDS,
            socket_connect_timeout=PROBE_TIMEOUT_SECONDS,
        )
        client.ping()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True}


def check_broker() -> dict[str, Any]:
    """The queue that takes deferred tardiness work and notification delivery."""

    try:
        with celery_app.connection_for_write(
            connect_timeout=PROBE_TIMEOUT_SECONDS
        ) as conn:
            conn.ensure_connection(max_retries=1)
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True, "transport": str(conn.transport_cls)}


def check_rules() -> dict[str, Any]:
    try:
        tardiness = TardinessRule.objects.filter(is_active=True).count()
        disciplinary = DisciplinaryActionRule.objects.filter(is_active=True).count()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    info: dict[str, Any] = {
        "ok": tardiness > 0 and disciplinary > 0,
        "tardiness_rules": tardiness,
        "disciplinary_rules": disciplinary,
    }
    if not info["ok"]:
        info["error"] = "No active rules; run seed_default_rules"
    return info


# Probing a broken connection must not open a request transaction first.
@transaction.non_atomic_requests
def health(request):
    components = {
        "db": check_db(),
        "redis": check_redis(),
        "broker": check_broker(),
        "rules": check_rules(),
    }

    if all(v["ok"] for v in components.values()):
        status = "ok"
    elif components["db"]["ok"]:
        status = "degraded"
    else:
        status = "down"

    return JsonResponse(
        {"status": status, "components": components},
        status=200 if status == "ok" else 503,
    )
