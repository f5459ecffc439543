from __future__ import annotations

from zoneinfo import ZoneInfo

from django.conf import settings


def attendance_time_zone() -> ZoneInfo:
    """Zone used to decide "today" when a shift does not define its own."""

    name = getattr(settings, "ATTENDANCE_TIME_ZONE", None) or settings.TIME_ZONE
    return ZoneInfo(name)


def default_grace_period_minutes() -> int:
    """Grace minutes applied when the shift does not set its own (default: 0)."""

    try:
        return max(0, int(getattr(settings, "ATTENDANCE_GRACE_PERIOD_MINUTES", 0)))
    except (TypeError, ValueError):
        return 0


def auto_checkout_interval_minutes() -> int:
    """Cadence of the auto-checkout sweep (default: 30)."""

    return int(getattr(settings, "AUTO_CHECKOUT_INTERVAL_MINUTES", 30))


def discipline_sweep_interval_minutes() -> int:
    """Cadence of the disciplinary reconciliation sweep (default: 60)."""

    return int(getattr(settings, "DISCIPLINE_SWEEP_INTERVAL_MINUTES", 60))


def tardiness_max_retries() -> int:
    """In-request attempts for tardiness processing under contention."""

    return max(1, int(getattr(settings, "TARDINESS_MAX_RETRIES", 3)))


def tardiness_retry_backoff_seconds() -> float:
    return float(getattr(settings, "TARDINESS_RETRY_BACKOFF_SECONDS", 0.2))


def notification_webhook_url() -> str:
    """External notification service endpoint; empty disables delivery."""

    return str(getattr(settings, "DISCIPLINE_NOTIFICATION_WEBHOOK_URL", "") or "")


def notification_timeout_seconds() -> float:
    return float(getattr(settings, "DISCIPLINE_NOTIFICATION_TIMEOUT", 5.0))


def administrative_acts_risk_threshold() -> int:
    """Approved administrative acts (90 days) that lead to termination."""

    return int(getattr(settings, "ADMINISTRATIVE_ACTS_RISK_THRESHOLD", 3))
