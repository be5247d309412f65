"""Management command to clean up stale files from the staging area."""

import logging
from datetime import timedelta
from typing import Any, final, override

from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.library.infrastructure.staging import (
    sweep_stale_staged_files,
)

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Remove staged uploads that were never committed or released."""

    help = 'Clean up stale uploads from the staging area'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--max-age-hours',
            type=int,
            default=None,
            help=(
                'Minimum age of staged files to remove '
                '(default: LIBRARY_STAGING_MAX_AGE_HOURS)'
            ),
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        max_age_hours = options['max_age_hours']
        if max_age_hours is None:
            max_age_hours = settings.LIBRARY_STAGING_MAX_AGE_HOURS

        self.stdout.write(
            f'Looking for staged files older than {max_age_hours} hours',
        )

        stale = sweep_stale_staged_files(
            timedelta(hours=max_age_hours),
            dry_run=dry_run,
        )

        for path in stale:
            if dry_run:
                self.stdout.write(f'Would delete: {path.name}')
            else:
                logger.info('Purged staged file: %s', path.name)

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would purge {len(stale)} staged files'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Purged {len(stale)} staged files'),
            )
