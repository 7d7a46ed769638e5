"""
Management command to queue Sales Experience lesson reminder emails.

Meant to run hourly; each assignment only sends at 07:00 local time on
Monday, Wednesday and Friday.

Usage:
    python manage.py send_sales_lesson_reminders
    python manage.py send_sales_lesson_reminders --force-test --test-email me@example.com
    python manage.py send_sales_lesson_reminders --force-test --test-email me@example.com --agency-id <uuid>
    python manage.py send_sales_lesson_reminders --no-process
"""

from __future__ import annotations

import logging

from django.core.management.base import BaseCommand, CommandError

from agencybrain.core.exceptions import NotFoundError
from agencybrain.core.http import parse_uuid
from agencybrain.integrations.resend_client import ResendError
from agencybrain.sales_experience.services import email_queue_service, reminders_service

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Queue lesson_available emails for lessons unlocking today"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force-test",
            action="store_true",
            help="Ignore the 7AM / Mon-Wed-Fri gates and send only to --test-email",
        )
        parser.add_argument(
            "--test-email",
            type=str,
            default=None,
            help="Recipient for --force-test",
        )
        parser.add_argument(
            "--agency-id",
            type=str,
            default=None,
            help="Limit --force-test to one agency",
        )
        parser.add_argument(
            "--no-process",
            action="store_true",
            help="Queue only; do not run the email queue processor afterwards",
        )

    def handle(self, *args, **options):
        agency_id = None
        if options["agency_id"]:
            agency_id = parse_uuid(options["agency_id"])
            if agency_id is None:
                raise CommandError(f"Invalid --agency-id: {options['agency_id']}")

        try:
            outcomes = reminders_service.queue_lesson_reminders(
                force_test=options["force_test"],
                test_email=options["test_email"],
                agency_id=agency_id,
            )
        except (ValueError, NotFoundError) as e:
            raise CommandError(str(e))

        if not outcomes:
            self.stdout.write("No active assignments")
            return

        queued = 0
        for outcome in outcomes:
            line = f"  {outcome.agency_id}: {outcome.status}"
            if outcome.lesson_title:
                line += f" ({outcome.lesson_title}, {outcome.queued} queued)"
            if outcome.error:
                line += f" error={outcome.error}"
            self.stdout.write(line)
            queued += outcome.queued

        self.stdout.write(self.style.SUCCESS(f"Queued {queued} reminder emails"))

        if queued and not options["no_process"]:
            try:
                summary = email_queue_service.process_queue()
            except (ResendError, ValueError) as e:
                # Rows stay queued for the next processor run
                self.stdout.write(self.style.WARNING(f"Queue processor not run: {e}"))
                return
            self.stdout.write(f"Processor: sent={summary.sent} failed={summary.failed} skipped={summary.skipped}")
