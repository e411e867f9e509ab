"""
Delete expired refresh tokens.

Schedule it hourly, for example from cron:

    0 * * * * python manage.py cleanup_tokens
"""
from django.core.management.base import BaseCommand

from blog_api.tokens import cleanup_expired_tokens, get_cleanup_stats


class Command(BaseCommand):
    help = "Delete expired refresh tokens"

    def add_arguments(self, parser):
        parser.add_argument(
            "--stats",
            action="store_true",
            help="Only report expired token counts, delete nothing",
        )

    def handle(self, *args, **options):
        if options["stats"]:
            stats = get_cleanup_stats()
            self.stdout.write(f"Users: {stats['total_users']}")
            self.stdout.write(f"Users with expired tokens: {stats['users_with_expired_tokens']}")
            self.stdout.write(f"Expired tokens: {stats['total_expired_tokens']}")
            return

        count = cleanup_expired_tokens()
        self.stdout.write(self.style.SUCCESS(f"{count} expired refresh tokens removed."))
