"""
Delete media that was never attached to an article.
"""
import logging
from datetime import timedelta

from django.core.management.base import BaseCommand

from blog_api.conf import api_settings
from blog_api.models import Media

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Delete orphaned media older than a grace period"

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=None,
            help="Grace period in hours (default: ORPHAN_MEDIA_MAX_AGE setting)",
        )

    def handle(self, *args, **options):
        max_age = api_settings.ORPHAN_MEDIA_MAX_AGE
        if options["hours"] is not None:
            max_age = timedelta(hours=options["hours"])

        count = Media.objects.cleanup(max_age)
        logger.info("Media cleanup finished: %d orphaned files removed", count)
        self.stdout.write(self.style.SUCCESS(f"{count} orphaned media removed."))
