import logging
import time

from django.core.management.base import BaseCommand

from ...services.outbox import SYNC_PERIOD, outbox

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Deliver queued outgoing messages, every 30 seconds unless --once is given."

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Run a single sync pass and exit.")
        parser.add_argument("--interval", type=float, default=SYNC_PERIOD, help="Seconds between sync passes.")

    def handle(self, *args, **options):
        while True:
            report = outbox.sync()
            if report.ran:
                self.stdout.write(
                    f"reconciled={report.reconciled} sent={report.sent} failed={report.failed}"
                )
            if options["once"]:
                return
            try:
                time.sleep(options["interval"])
            except KeyboardInterrupt:
                logger.info("Outbox sync worker stopped")
                return
