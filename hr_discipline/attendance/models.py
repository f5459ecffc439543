from datetime import timedelta

from django.db import models
from django.utils.translation import gettext_lazy as _


class Attendance(models.Model):
    """One attendance session per employee per calendar day.

    - ``minutes_late`` is computed once at check-in from the effective shift
    - ``tardiness_processed`` makes tardiness replay idempotent
    - ``disciplinary_record`` is set on absences created by a suspension
    """

    class Status(models.TextChoices):
        PRESENT = "PRESENT", _("Present")
        LATE = "LATE", _("Late")
        ABSENT = "ABSENT", _("Absent")

    class Method(models.TextChoices):
        MANUAL = "MANUAL", _("Manual")
        DEVICE = "DEVICE", _("Device")
        AUTO = "AUTO", _("Automatic")
        SYSTEM = "SYSTEM", _("System")

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="attendances",
    )
    date = models.DateField()
    check_in_time = models.DateTimeField(null=True, blank=True)
    check_out_time = models.DateTimeField(null=True, blank=True)
    check_in_method = models.CharField(
        max_length=16, choices=Method.choices, blank=True, default=""
    )
    check_out_method = models.CharField(
        max_length=16, choices=Method.choices, blank=True, default=""
    )
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.PRESENT
    )
    minutes_late = models.PositiveIntegerField(default=0)
    tardiness_processed = models.BooleanField(default=False)
    worked_hours = models.DecimalField(
        max_digits=6, decimal_places=2, null=True, blank=True
    )
    overtime_hours = models.DecimalField(
        max_digits=6, decimal_places=2, null=True, blank=True
    )
    is_auto_checkout = models.BooleanField(default=False)
    disciplinary_record = models.ForeignKey(
        "discipline.EmployeeDisciplinaryRecord",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="absences",
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        unique_together = (("employee", "date"),)
        indexes = [
            models.Index(
                fields=["date", "check_out_time"], name="attendance_open_by_date_idx"
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"Attendance({self.employee_id}@{self.date})"

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    @property
    def logged_time(self) -> timedelta | None:
        """Raw logged time (check_out - check_in) when the session is closed."""
        if not self.check_in_time or not self.check_out_time:
            return None
        return self.check_out_time - self.check_in_time
