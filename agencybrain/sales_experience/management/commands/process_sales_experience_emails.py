"""
Management command to drain the Sales Experience email queue.

Usage:
    python manage.py process_sales_experience_emails
"""

from __future__ import annotations

import logging

from django.core.management.base import BaseCommand, CommandError

from agencybrain.integrations.resend_client import EmailSendingDisabledError
from agencybrain.sales_experience.services import email_queue_service

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Send due Sales Experience emails through Resend"

    def handle(self, *args, **options):
        try:
            summary = email_queue_service.process_queue()
        except EmailSendingDisabledError as e:
            raise CommandError(str(e))
        except ValueError as e:
            # Missing RESEND_API_KEY
            raise CommandError(f"Email service not configured: {e}")

        if summary.stale:
            self.stdout.write(f"Marked {summary.stale} stale emails as failed")

        if not summary.processed:
            self.stdout.write("No pending emails")
            return

        self.stdout.write(
            f"Processed {summary.processed}: sent={summary.sent} "
            f"failed={summary.failed} skipped={summary.skipped}"
        )
        for error in summary.errors:
            self.stdout.write(self.style.WARNING(f"  {error['id']}: {error['error']}"))

        self.stdout.write(self.style.SUCCESS("Email queue processed"))
