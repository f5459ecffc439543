import django.db.models.deletion
from django.conf import settings
from django.db import migrations
from django.db import models

TRIGGER_CHOICES = [
    ("FORMAL_TARDIES", "Formal tardies"),
    ("ADMINISTRATIVE_ACTS", "Administrative acts"),
    ("UNJUSTIFIED_ABSENCES", "Unjustified absences"),
]
ACTION_CHOICES = [
    ("ADMINISTRATIVE_ACT", "Administrative act"),
    ("SUSPENSION", "Suspension"),
    ("TERMINATION", "Termination"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("employees", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TardinessRule",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.SlugField(max_length=64, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("LATE_ARRIVAL", "Late arrival"),
                            ("DIRECT_TARDINESS", "Direct tardiness"),
                        ],
                        max_length=32,
                    ),
                ),
                ("start_minutes_late", models.PositiveIntegerField()),
                ("end_minutes_late", models.PositiveIntegerField(blank=True, null=True)),
                ("accumulation_count", models.PositiveIntegerField(default=1)),
                ("equivalent_formal_tardies", models.PositiveIntegerField(default=1)),
                ("applies_after_formal_tardy", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["type", "applies_after_formal_tardy", "start_minutes_late"],
            },
        ),
        migrations.CreateModel(
            name="DisciplinaryActionRule",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.SlugField(max_length=64, unique=True)),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True)),
                (
                    "trigger_type",
                    models.CharField(choices=TRIGGER_CHOICES, max_length=32),
                ),
                ("trigger_count", models.PositiveIntegerField()),
                ("period_days", models.PositiveIntegerField(default=30)),
                (
                    "action_type",
                    models.CharField(choices=ACTION_CHOICES, max_length=32),
                ),
                ("suspension_days", models.PositiveIntegerField(blank=True, null=True)),
                ("affects_salary", models.BooleanField(default=False)),
                ("requires_approval", models.BooleanField(default=True)),
                ("auto_apply", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["trigger_type", "trigger_count"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("trigger_type", "trigger_count", "period_days"),
                        name="unique_active_disciplinary_trigger",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TardinessAccumulation",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("year", models.PositiveIntegerField()),
                ("month", models.PositiveSmallIntegerField()),
                ("late_arrivals_count", models.PositiveIntegerField(default=0)),
                ("direct_tardiness_count", models.PositiveIntegerField(default=0)),
                ("formal_tardies_count", models.PositiveIntegerField(default=0)),
                ("administrative_acts", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tardiness_accumulations",
                        to="employees.employee",
                    ),
                ),
            ],
            options={
                "ordering": ["-year", "-month"],
                "unique_together": {("employee", "year", "month")},
            },
        ),
        migrations.CreateModel(
            name="EmployeeDisciplinaryRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "action_type",
                    models.CharField(choices=ACTION_CHOICES, max_length=32),
                ),
                (
                    "trigger_type",
                    models.CharField(
                        blank=True,
                        choices=TRIGGER_CHOICES,
                        default="",
                        max_length=32,
                    ),
                ),
                ("trigger_count", models.PositiveIntegerField(blank=True, null=True)),
                ("applied_date", models.DateField()),
                ("effective_date", models.DateField(blank=True, null=True)),
                ("expiration_date", models.DateField(blank=True, null=True)),
                ("suspension_days", models.PositiveIntegerField(blank=True, null=True)),
                ("affects_salary", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("ACTIVE", "Active"),
                            ("CANCELLED", "Cancelled"),
                            ("COMPLETED", "Completed"),
                        ],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("approval_date", models.DateTimeField(blank=True, null=True)),
                ("description", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_disciplinary_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="disciplinary_records",
                        to="employees.employee",
                    ),
                ),
                (
                    "rule",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="records",
                        to="discipline.disciplinaryactionrule",
                    ),
                ),
            ],
            options={
                "ordering": ["-applied_date", "-pk"],
                "indexes": [
                    models.Index(
                        fields=["employee", "trigger_type", "trigger_count"],
                        name="discipline_record_trigger_idx",
                    ),
                    models.Index(
                        fields=["status", "action_type", "expiration_date"],
                        name="discipline_record_expiry_idx",
                    ),
                ],
            },
        ),
    ]
