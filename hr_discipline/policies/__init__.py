"""Standalone policy module.

Engine apps (attendance, discipline, notifications) read their tunables from
here instead of touching ``settings`` or embedding constants locally.
"""

from .accessors import administrative_acts_risk_threshold
from .accessors import attendance_time_zone
from .accessors import auto_checkout_interval_minutes
from .accessors import default_grace_period_minutes
from .accessors import discipline_sweep_interval_minutes
from .accessors import notification_timeout_seconds
from .accessors import notification_webhook_url
from .accessors import tardiness_max_retries
from .accessors import tardiness_retry_backoff_seconds

__all__ = [
    "administrative_acts_risk_threshold",
    "attendance_time_zone",
    "auto_checkout_interval_minutes",
    "default_grace_period_minutes",
    "discipline_sweep_interval_minutes",
    "notification_timeout_seconds",
    "notification_webhook_url",
    "tardiness_max_retries",
    "tardiness_retry_backoff_seconds",
]
