import logging

from django.core.management.base import BaseCommand

from ...services.withdrawal import UNKNOWN, resume_pending

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Resume status monitoring for withdrawals still pending or processing."

    def handle(self, *args, **options):
        results = resume_pending()
        if not results:
            self.stdout.write("No withdrawals awaiting confirmation.")
            return
        for result in results:
            line = f"{result.outcome} after {result.elapsed:.0f}s"
            if result.outcome == UNKNOWN:
                self.stdout.write(self.style.WARNING(line))
            else:
                self.stdout.write(self.style.SUCCESS(line))
        logger.info("Resumed monitoring for %s withdrawal(s)", len(results))
