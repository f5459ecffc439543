from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class TardinessRule(models.Model):
    """Minute-range classifier for late check-ins.

    Active rules of the same ``type`` and ``applies_after_formal_tardy`` tier
    never overlap; ``RuleCatalog`` enforces it on write.
    """

    class Type(models.TextChoices):
        LATE_ARRIVAL = "LATE_ARRIVAL", _("Late arrival")
        DIRECT_TARDINESS = "DIRECT_TARDINESS", _("Direct tardiness")

    code = models.SlugField(max_length=64, unique=True)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=32, choices=Type.choices)
    start_minutes_late = models.PositiveIntegerField()
    # None = unbounded
    end_minutes_late = models.PositiveIntegerField(null=True, blank=True)
    accumulation_count = models.PositiveIntegerField(default=1)
    equivalent_formal_tardies = models.PositiveIntegerField(default=1)
    # Only consulted once the employee has a formal tardy this month
    applies_after_formal_tardy = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["type", "applies_after_formal_tardy", "start_minutes_late"]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"TardinessRule({self.code})"

    def matches(self, minutes_late: int) -> bool:
        if minutes_late < self.start_minutes_late:
            return False
        return self.end_minutes_late is None or minutes_late <= self.end_minutes_late

    def overlaps(self, other: "TardinessRule") -> bool:
        self_end = self.end_minutes_late
        other_end = other.end_minutes_late
        starts_before_other_ends = other_end is None or self.start_minutes_late <= other_end
        ends_after_other_starts = self_end is None or self_end >= other.start_minutes_late
        return starts_before_other_ends and ends_after_other_starts


class DisciplinaryActionRule(models.Model):
    class TriggerType(models.TextChoices):
        FORMAL_TARDIES = "FORMAL_TARDIES", _("Formal tardies")
        ADMINISTRATIVE_ACTS = "ADMINISTRATIVE_ACTS", _("Administrative acts")
        UNJUSTIFIED_ABSENCES = "UNJUSTIFIED_ABSENCES", _("Unjustified absences")

    class ActionType(models.TextChoices):
        ADMINISTRATIVE_ACT = "ADMINISTRATIVE_ACT", _("Administrative act")
        SUSPENSION = "SUSPENSION", _("Suspension")
        TERMINATION = "TERMINATION", _("Termination")

    code = models.SlugField(max_length=64, unique=True)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    trigger_type = models.CharField(max_length=32, choices=TriggerType.choices)
    trigger_count = models.PositiveIntegerField()
    period_days = models.PositiveIntegerField(default=30)
    action_type = models.CharField(max_length=32, choices=ActionType.choices)
    suspension_days = models.PositiveIntegerField(null=True, blank=True)
    affects_salary = models.BooleanField(default=False)
    requires_approval = models.BooleanField(default=True)
    auto_apply = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["trigger_type", "trigger_count"]
        constraints = [
            models.UniqueConstraint(
                fields=["trigger_type", "trigger_count", "period_days"],
                condition=models.Q(is_active=True),
                name="unique_active_disciplinary_trigger",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"DisciplinaryActionRule({self.code})"


class TardinessAccumulation(models.Model):
    """Per employee per calendar month counters.

    Mutated only through ``AccumulationLedger``.
    """

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="tardiness_accumulations",
    )
    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()
    late_arrivals_count = models.PositiveIntegerField(default=0)
    direct_tardiness_count = models.PositiveIntegerField(default=0)
    formal_tardies_count = models.PositiveIntegerField(default=0)
    administrative_acts = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year", "-month"]
        unique_together = (("employee", "year", "month"),)

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"TardinessAccumulation({self.employee_id}@{self.year}-{self.month:02d})"


class EmployeeDisciplinaryRecord(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        ACTIVE = "ACTIVE", _("Active")
        CANCELLED = "CANCELLED", _("Cancelled")
        COMPLETED = "COMPLETED", _("Completed")

    ActionType = DisciplinaryActionRule.ActionType
    TriggerType = DisciplinaryActionRule.TriggerType

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="disciplinary_records",
    )
    # None for manual records
    rule = models.ForeignKey(
        DisciplinaryActionRule,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="records",
    )
    action_type = models.CharField(max_length=32, choices=ActionType.choices)
    trigger_type = models.CharField(
        max_length=32, choices=TriggerType.choices, blank=True, default=""
    )
    trigger_count = models.PositiveIntegerField(null=True, blank=True)
    applied_date = models.DateField()
    effective_date = models.DateField(null=True, blank=True)
    expiration_date = models.DateField(null=True, blank=True)
    suspension_days = models.PositiveIntegerField(null=True, blank=True)
    affects_salary = models.BooleanField(default=False)
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.PENDING
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_disciplinary_records",
    )
    approval_date = models.DateTimeField(null=True, blank=True)
    description = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-applied_date", "-pk"]
        indexes = [
            models.Index(
                fields=["employee", "trigger_type", "trigger_count"],
                name="discipline_record_trigger_idx",
            ),
            models.Index(
                fields=["status", "action_type", "expiration_date"],
                name="discipline_record_expiry_idx",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"EmployeeDisciplinaryRecord({self.employee_id}:{self.action_type}:{self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING
