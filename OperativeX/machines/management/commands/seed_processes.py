# PATH: /OperativeX/machines/management/commands/seed_processes.py
from django.core.management.base import BaseCommand

from machines.models import PROCESS_NAMES, Process


class Command(BaseCommand):
    help = "Create any missing rows in the processes catalog."

    def handle(self, *args, **options):
        created = 0
        for name in PROCESS_NAMES:
            _, was_created = Process.objects.get_or_create(name=name)
            if was_created:
                created += 1
        if created:
            self.stdout.write(self.style.SUCCESS(f"Added {created} processes to the catalog."))
        else:
            self.stdout.write("Process catalog already complete.")
