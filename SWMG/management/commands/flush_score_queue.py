import time

from django.conf import settings
from django.core.management.base import BaseCommand

from SWMG.client import HttpScoreTransport, PendingEditLog, ScoreQueueFlusher


class Command(BaseCommand):
    help = 'Send the pending hole-score edits in a device queue file to the server'

    def add_arguments(self, parser):
        parser.add_argument('--server', required=True, help='Base URL of the scoring server')
        parser.add_argument('--queue', required=True, help='Path to the pending edit log (JSON lines)')
        parser.add_argument('--timeout', type=float, default=10, help='HTTP timeout in seconds')
        parser.add_argument('--watch', action='store_true',
                            help='Keep running and flush every SWMG_FLUSH_INTERVAL_SECONDS')

    def handle(self, *args, **options):
        log = PendingEditLog(options['queue'])
        flusher = ScoreQueueFlusher(
            log,
            HttpScoreTransport(options['server'], timeout=options['timeout']),
            interval=settings.SWMG_FLUSH_INTERVAL_SECONDS,
        )

        if options['watch']:
            flusher.start()
            self.stdout.write(f"Watching {options['queue']}, Ctrl-C to stop")
            try:
                while True:
                    time.sleep(flusher.interval)
                    self.stdout.write(flusher.status_text)
            except KeyboardInterrupt:
                flusher.stop(timeout=5)
            return

        if not len(log):
            self.stdout.write("No pending score edits.")
            return

        report = flusher.flush()
        summary = (
            f"{report.accepted} accepted, {report.ignored} stale, {report.rejected} rejected, "
            f"{report.remaining} still pending"
        )
        if report.failed:
            self.stderr.write(self.style.ERROR(f"Flush stopped early: {summary}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Flushed score queue: {summary}"))
