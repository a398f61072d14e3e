"""
Expire Attempts Command

Closes every in-progress attempt whose time limit (plus grace) has run out,
grading whatever responses were buffered. Meant to run periodically
(e.g. via Cronjob) so abandoned timed attempts do not stay open forever.

Usage:
    python manage.py expire_attempts
    python manage.py expire_attempts --dry-run
    python manage.py expire_attempts --verbose

Author: DSP Development Team
Version: 1.0.0
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from assessments.models import Attempt
from assessments.services.attempts import AttemptService


class Command(BaseCommand):
    help = "Expire in-progress attempts whose time limit has passed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Zeige nur was abgelaufen ist, ohne Versuche zu schließen",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Zeige detaillierte Informationen",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        verbose = options["verbose"]

        service = AttemptService()
        now = timezone.now()

        open_attempts = Attempt.objects.filter(status=Attempt.Status.IN_PROGRESS)
        overdue = [a for a in open_attempts if service.enforcer.is_overdue(a, now)]

        if not overdue:
            self.stdout.write(self.style.SUCCESS("No overdue attempts found"))
            return

        if verbose:
            for attempt in overdue:
                self.stdout.write(
                    f"  - Attempt {attempt.pk}: user {attempt.user_id}, "
                    f"started {attempt.started_at:%Y-%m-%d %H:%M:%S}, "
                    f"limit {attempt.time_limit_seconds}s"
                )

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f"DRY RUN: {len(overdue)} attempt(s) would be expired")
            )
            return

        expired = service.expire_overdue()
        self.stdout.write(self.style.SUCCESS(f"Expired {len(expired)} attempt(s)"))
