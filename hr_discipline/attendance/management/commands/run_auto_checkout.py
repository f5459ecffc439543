import json

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError

from hr_discipline.discipline.container import build_discipline_services
from hr_discipline.exceptions import DisciplineError


class Command(BaseCommand):
    help = "Run one auto-checkout sweep now and print its report."

    def add_arguments(self, parser):
        parser.add_argument(
            "--employee",
            type=int,
            help="Close only this employee's open session, ignoring shift end.",
        )

    def handle(self, *args, **options):
        scheduler = build_discipline_services().auto_checkout
        employee_id = options.get("employee")
        if employee_id:
            try:
                session = scheduler.run_for_employee(employee_id)
            except DisciplineError as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(
                self.style.SUCCESS(
                    f"Closed attendance {session.pk}: worked {session.worked_hours}h"
                )
            )
            return
        report = scheduler.run()
        self.stdout.write(json.dumps(report.as_dict(), indent=2))
        style = self.style.SUCCESS if report.success else self.style.WARNING
        self.stdout.write(
            style(
                f"processed={report.processed} skipped={report.skipped} "
                f"errors={report.errors}"
            )
        )
