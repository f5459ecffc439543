from django.db import models
from django.utils.translation import gettext_lazy as _


class WorkShift(models.Model):
    """Named shift template with one or more periods per weekday."""

    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)
    description = models.TextField(blank=True)
    # Blank falls back to policies.attendance_time_zone()
    time_zone = models.CharField(max_length=50, blank=True)
    # None falls back to policies.default_grace_period_minutes()
    grace_period_minutes = models.PositiveIntegerField(null=True, blank=True)
    auto_checkout_enabled = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"WorkShift({self.code})"


class ShiftPeriod(models.Model):
    class Weekday(models.IntegerChoices):
        MONDAY = 0, _("Monday")
        TUESDAY = 1, _("Tuesday")
        WEDNESDAY = 2, _("Wednesday")
        THURSDAY = 3, _("Thursday")
        FRIDAY = 4, _("Friday")
        SATURDAY = 5, _("Saturday")
        SUNDAY = 6, _("Sunday")

    shift = models.ForeignKey(WorkShift, on_delete=models.CASCADE, related_name="periods")
    day_of_week = models.PositiveSmallIntegerField(choices=Weekday.choices)
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["shift", "day_of_week", "start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="shift_period_end_after_start",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"ShiftPeriod({self.shift_id}:{self.day_of_week} {self.start_time}-{self.end_time})"


class ShiftOverride(models.Model):
    """Replacement shift for one employee on one date."""

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="shift_overrides",
    )
    date = models.DateField()
    shift = models.ForeignKey(WorkShift, on_delete=models.CASCADE, related_name="overrides")
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date"]
        unique_together = (("employee", "date"),)

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"ShiftOverride({self.employee_id}@{self.date}->{self.shift_id})"
