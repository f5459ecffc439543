import django.db.models.deletion
from django.db import migrations
from django.db import models

METHOD_CHOICES = [
    ("MANUAL", "Manual"),
    ("DEVICE", "Device"),
    ("AUTO", "Automatic"),
    ("SYSTEM", "System"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("discipline", "0001_initial"),
        ("employees", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Attendance",
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
                ("date", models.DateField()),
                ("check_in_time", models.DateTimeField(blank=True, null=True)),
                ("check_out_time", models.DateTimeField(blank=True, null=True)),
                (
                    "check_in_method",
                    models.CharField(
                        blank=True, choices=METHOD_CHOICES, default="", max_length=16
                    ),
                ),
                (
                    "check_out_method",
                    models.CharField(
                        blank=True, choices=METHOD_CHOICES, default="", max_length=16
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PRESENT", "Present"),
                            ("LATE", "Late"),
                            ("ABSENT", "Absent"),
                        ],
                        default="PRESENT",
                        max_length=16,
                    ),
                ),
                ("minutes_late", models.PositiveIntegerField(default=0)),
                ("tardiness_processed", models.BooleanField(default=False)),
                (
                    "worked_hours",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=6, null=True
                    ),
                ),
                (
                    "overtime_hours",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=6, null=True
                    ),
                ),
                ("is_auto_checkout", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "disciplinary_record",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="absences",
                        to="discipline.employeedisciplinaryrecord",
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendances",
                        to="employees.employee",
                    ),
                ),
            ],
            options={
                "ordering": ["-date"],
                "unique_together": {("employee", "date")},
                "indexes": [
                    models.Index(
                        fields=["date", "check_out_time"],
                        name="attendance_open_by_date_idx",
                    ),
                ],
            },
        ),
    ]
