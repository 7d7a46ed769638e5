"""
Management Command tests.

Tests verify:
- send_sales_lesson_reminders argument validation and output
- Force-test mode queues for the test address only
- The reminder command leaves rows queued when sending is disabled
- process_sales_experience_emails refuses to run while sending is disabled
- process_sales_experience_emails output summary
"""

from datetime import timedelta
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from agencybrain.sales_experience.enums import EmailStatus
from agencybrain.sales_experience.models import EmailQueueItem, EmailTemplate
from tests.fixtures import create_sales_assignment, create_sales_curriculum, today_in

QUEUE_SERVICE = "agencybrain.sales_experience.services.email_queue_service"


class FakeResendClient:
    def __init__(self):
        self.batches = []

    def send_batch(self, emails):
        self.batches.append(list(emails))
        return [f"msg_{index}" for index in range(len(emails))]


@pytest.fixture
def assignment(agency, db):
    create_sales_curriculum(weeks=2)
    return create_sales_assignment(agency, today_in())


def run_command(name, *args):
    out = StringIO()
    call_command(name, *args, stdout=out)
    return out.getvalue()


# =============================================================================
# send_sales_lesson_reminders
# =============================================================================


@pytest.mark.django_db
class TestSendLessonReminders:
    def test_no_active_assignments(self):
        assert "No active assignments" in run_command("send_sales_lesson_reminders")

    def test_invalid_agency_id(self):
        with pytest.raises(CommandError, match="Invalid --agency-id"):
            run_command(
                "send_sales_lesson_reminders",
                "--force-test",
                "--test-email",
                "qa@agency.test",
                "--agency-id",
                "nope",
            )

    def test_force_test_requires_email(self, assignment):
        with pytest.raises(CommandError, match="test email"):
            run_command("send_sales_lesson_reminders", "--force-test")

    def test_missing_template(self, assignment):
        EmailTemplate.objects.filter(template_key="lesson_available").delete()

        with pytest.raises(CommandError, match="lesson_available template"):
            run_command("send_sales_lesson_reminders")

    def test_force_test_queues_for_test_address(self, assignment):
        output = run_command(
            "send_sales_lesson_reminders",
            "--force-test",
            "--test-email",
            "qa@agency.test",
            "--agency-id",
            str(assignment.agency_id),
            "--no-process",
        )

        assert "Queued 1 reminder emails" in output
        item = EmailQueueItem.objects.get()
        assert item.recipient_email == "qa@agency.test"
        assert item.status == EmailStatus.PENDING

    def test_processor_skipped_while_sending_disabled(self, assignment):
        output = run_command("send_sales_lesson_reminders", "--force-test", "--test-email", "qa@agency.test")

        assert "Queue processor not run" in output
        assert EmailQueueItem.objects.get().status == EmailStatus.PENDING

    def test_processor_runs_after_queueing(self, assignment, settings):
        settings.EMAIL_SENDING_ENABLED = True
        fake = FakeResendClient()

        with patch(f"{QUEUE_SERVICE}.get_client", return_value=fake):
            output = run_command("send_sales_lesson_reminders", "--force-test", "--test-email", "qa@agency.test")

        assert "Processor: sent=1" in output
        assert EmailQueueItem.objects.get().status == EmailStatus.SENT
        [[email]] = fake.batches
        assert email.to == "qa@agency.test"


# =============================================================================
# process_sales_experience_emails
# =============================================================================


@pytest.mark.django_db
class TestProcessEmails:
    def _queue(self, assignment):
        return EmailQueueItem.objects.create(
            assignment=assignment,
            template_key="quiz_result",
            recipient_email="sam@agency.test",
            scheduled_for=timezone.now() - timedelta(minutes=1),
            email_subject="Your quiz results: Week 1 Day 5",
            email_body_html="<p>You scored 100%</p>",
        )

    def test_refuses_when_disabled(self, assignment):
        self._queue(assignment)

        with pytest.raises(CommandError, match="EMAIL_SENDING_ENABLED"):
            run_command("process_sales_experience_emails")

    def test_no_pending(self, settings):
        settings.EMAIL_SENDING_ENABLED = True
        assert "No pending emails" in run_command("process_sales_experience_emails")

    def test_processes_queue(self, assignment, settings):
        settings.EMAIL_SENDING_ENABLED = True
        item = self._queue(assignment)

        with patch(f"{QUEUE_SERVICE}.get_client", return_value=FakeResendClient()):
            output = run_command("process_sales_experience_emails")

        assert "Processed 1: sent=1 failed=0 skipped=0" in output
        item.refresh_from_db()
        assert item.status == EmailStatus.SENT
        assert item.resend_message_id == "msg_0"

    def test_missing_api_key(self, assignment, settings):
        settings.EMAIL_SENDING_ENABLED = True
        settings.RESEND_API_KEY = ""
        self._queue(assignment)

        with pytest.raises(CommandError, match="Email service not configured"):
            run_command("process_sales_experience_emails")
