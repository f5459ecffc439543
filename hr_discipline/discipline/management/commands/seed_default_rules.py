from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.db import transaction

from hr_discipline.discipline.container import build_discipline_services
from hr_discipline.exceptions import ConfigurationError


class Command(BaseCommand):
    help = "Create or refresh the standard tardiness and disciplinary rules."

    @transaction.atomic
    def handle(self, *args, **options):
        try:
            result = build_discipline_services().catalog.seed_default_rules()
        except ConfigurationError as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(
            self.style.SUCCESS(
                f"Rules seeded: {result.created} created, {result.updated} updated"
            )
        )
