# PATH: /OperativeX/jobs/management/commands/prune_changes.py
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from jobs.changes import prune


class Command(BaseCommand):
    help = "Delete job process change feed rows older than the given number of days."

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=7, help="Keep this many days of changes (default 7).")

    def handle(self, *args, **options):
        cutoff = timezone.now() - timedelta(days=options['days'])
        deleted = prune(cutoff)
        if deleted:
            self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} change rows."))
        else:
            self.stdout.write("No change rows to delete.")
