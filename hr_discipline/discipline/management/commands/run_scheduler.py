import json

from django.core.management.base import BaseCommand

from config.celery_app import app
from hr_discipline.scheduling import SchedulerHandle


class Command(BaseCommand):
    help = "Start the periodic auto-checkout and discipline sweep jobs (Celery beat)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--status",
            action="store_true",
            help="Install the jobs, print the scheduler status and exit.",
        )
        parser.add_argument("--loglevel", default="INFO")

    def handle(self, *args, **options):
        handle = SchedulerHandle(app)
        handle.start()
        if options["status"]:
            self.stdout.write(json.dumps(handle.status(), indent=2))
            handle.stop()
            return
        try:
            app.Beat(loglevel=options["loglevel"]).run()
        finally:
            handle.stop()
