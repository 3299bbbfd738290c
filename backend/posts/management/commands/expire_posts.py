from django.core.management.base import BaseCommand

from services.discovery import expire_posts_older_than


class Command(BaseCommand):
    help = "Deactivate posts older than a cut-off so they leave feeds and notifications."

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=24,
            help="Deactivate active posts older than this many hours (default: 24).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deactivated without changing anything.",
        )

    def handle(self, *args, **options):
        hours = options["hours"]
        dry_run = options["dry_run"]

        count = expire_posts_older_than(hours, dry_run=dry_run)

        if dry_run:
            self.stdout.write(
                self.style.WARNING(
                    f"DRY RUN: Would deactivate {count} posts older than {hours} hours."
                )
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Deactivated {count} posts older than {hours} hours."
                )
            )
