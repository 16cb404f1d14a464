"""
Management command to close open jobs whose deadline has passed.

Usage:
    python manage.py close_expired_jobs [--dry-run]
"""
import logging

from django.core.management.base import BaseCommand
from django.utils import timezone

from hiring.models import Job

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Close open jobs whose application deadline has passed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be closed without actually closing'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        now = timezone.now()

        expired = Job.objects.filter(status='open', deadline__lt=now)
        count = expired.count()

        if dry_run:
            self.stdout.write(self.style.WARNING(f"DRY RUN: Would close {count} jobs"))
            for job in expired.order_by('deadline')[:10]:
                self.stdout.write(f"  - [{job.id}] {job.title} at {job.company} (deadline: {job.deadline.isoformat()})")
            if count > 10:
                self.stdout.write(f"  ... and {count - 10} more")
            return

        updated = expired.update(status='closed', updated_at=now)
        self.stdout.write(self.style.SUCCESS(f"Successfully closed {updated} expired jobs"))
        logger.info(f"Closed {updated} jobs with deadlines before {now.isoformat()}")
