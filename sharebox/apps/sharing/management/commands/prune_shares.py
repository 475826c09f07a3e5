"""Management command to remove shares whose files are all gone."""

from typing import Any

from django.core.management.base import BaseCommand

from sharebox.apps.sharing.logic.share_operations import prune_orphaned_shares


class Command(BaseCommand):
    """Delete shares that no longer point at any existing file."""

    help = 'Delete shares whose shared files no longer exist'

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

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the prune command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']

        orphaned = prune_orphaned_shares(dry_run=dry_run)

        for share_uri in orphaned:
            prefix = 'Would delete' if dry_run else 'Deleted'
            self.stdout.write(f'{prefix}: {share_uri}')

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would prune {len(orphaned)} shares'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Pruned {len(orphaned)} shares'),
            )
