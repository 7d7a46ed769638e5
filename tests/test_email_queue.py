"""
Email queue processor tests.

Tests verify:
- Nothing is touched while EMAIL_SENDING_ENABLED is off
- Stale rows are failed before sending
- Template rendering ({{variables}} escaped in bodies, {{#if}} markers, pre-rendered bodies)
- Missing or inactive templates
- Retry accounting on Resend errors
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from agencybrain.integrations.resend_client import EmailSendingDisabledError, ResendError
from agencybrain.sales_experience.enums import EmailStatus
from agencybrain.sales_experience.models import EmailQueueItem, EmailTemplate
from agencybrain.sales_experience.services import email_queue_service
from agencybrain.sales_experience.services.email_queue_service import MAX_RETRIES, STALE_MESSAGE
from tests.fixtures import create_sales_assignment, create_sales_curriculum, today_in


class FakeResendClient:
    """Records batches; returns ids or raises a configured error."""

    def __init__(self, error=None):
        self.error = error
        self.batches = []

    def send_batch(self, emails):
        self.batches.append(list(emails))
        if self.error:
            raise self.error
        return [f"msg_{index}" for index in range(len(emails))]


@pytest.fixture
def assignment(agency, db):
    create_sales_curriculum(weeks=1)
    return create_sales_assignment(agency, today_in())


def queue_item(assignment, **overrides):
    fields = {
        "assignment": assignment,
        "template_key": "lesson_available",
        "recipient_email": "sam@agency.test",
        "recipient_name": "Sam",
        "scheduled_for": timezone.now() - timedelta(minutes=5),
        "email_subject": "New Sales Training Lesson: Discovery",
        "variables_json": {
            "staff_name": "Sam",
            "lesson_title": "Discovery",
            "week_number": "1",
            "day_name": "Monday",
            "lesson_url": "https://app.test/staff/sales-training/week/1",
        },
    }
    fields.update(overrides)
    return EmailQueueItem.objects.create(**fields)


# =============================================================================
# RENDERING
# =============================================================================


class TestRendering:
    def test_substitute(self):
        assert email_queue_service.substitute("Hi {{name}}, {{name}}!", {"name": "Sam"}) == "Hi Sam, Sam!"

    def test_strip_template_tags(self):
        html = "<p>{{#if feedback_ai}}Feedback{{/if}} {{unknown}}</p>"
        assert email_queue_service.strip_template_tags(html) == "<p>Feedback </p>"


@pytest.mark.django_db
def test_render_from_template(assignment):
    item = queue_item(assignment)
    template = EmailTemplate.objects.get(template_key="lesson_available")

    subject, html = email_queue_service.render_item(item, template)

    assert subject == "New Sales Training Lesson: Discovery"
    assert "<h2>Hi Sam,</h2>" in html
    assert "Week 1 - Monday" in html
    assert 'href="https://app.test/staff/sales-training/week/1"' in html
    assert "{{" not in html


@pytest.mark.django_db
def test_body_variables_are_escaped(assignment):
    item = queue_item(
        assignment,
        email_subject="New Sales Training Lesson: {{lesson_title}}",
        variables_json={"staff_name": "<script>alert(1)</script>", "lesson_title": "Quotes & Closes"},
    )
    template = EmailTemplate.objects.get(template_key="lesson_available")

    subject, html = email_queue_service.render_item(item, template)

    assert subject == "New Sales Training Lesson: Quotes & Closes"
    assert "<h2>Hi &lt;script&gt;alert(1)&lt;/script&gt;,</h2>" in html
    assert "<h3>Quotes &amp; Closes</h3>" in html
    assert "<script>" not in html


@pytest.mark.django_db
def test_prerendered_body_wins(assignment):
    item = queue_item(assignment, template_key="quiz_result", email_body_html="<p>Already rendered</p>")
    template = EmailTemplate.objects.get(template_key="quiz_result")

    _, html = email_queue_service.render_item(item, template)

    assert html == "<p>Already rendered</p>"


# =============================================================================
# PROCESSING
# =============================================================================


@pytest.mark.django_db
def test_disabled_sending_touches_nothing(assignment):
    item = queue_item(assignment)

    with pytest.raises(EmailSendingDisabledError):
        email_queue_service.process_queue(client=FakeResendClient())

    item.refresh_from_db()
    assert item.status == EmailStatus.PENDING


@pytest.mark.django_db
class TestProcessQueue:
    @pytest.fixture(autouse=True)
    def enable_sending(self, settings):
        settings.EMAIL_SENDING_ENABLED = True

    def test_sends_due_items(self, assignment):
        item = queue_item(assignment)
        client = FakeResendClient()
        now = timezone.now()

        summary = email_queue_service.process_queue(now=now, client=client)

        assert summary.processed == 1
        assert summary.sent == 1
        [[email]] = client.batches
        assert email.to == "sam@agency.test"
        assert email.subject == "New Sales Training Lesson: Discovery"

        item.refresh_from_db()
        assert item.status == EmailStatus.SENT
        assert item.sent_at == now
        assert item.resend_message_id == "msg_0"

    def test_future_items_wait(self, assignment):
        item = queue_item(assignment, scheduled_for=timezone.now() + timedelta(hours=1))
        client = FakeResendClient()

        summary = email_queue_service.process_queue(client=client)

        assert summary.processed == 0
        assert client.batches == []
        item.refresh_from_db()
        assert item.status == EmailStatus.PENDING

    def test_stale_items_fail_without_sending(self, assignment):
        item = queue_item(assignment)
        EmailQueueItem.objects.filter(pk=item.pk).update(created_at=timezone.now() - timedelta(hours=25))
        client = FakeResendClient()

        summary = email_queue_service.process_queue(client=client)

        assert summary.stale == 1
        assert summary.processed == 0
        assert client.batches == []
        item.refresh_from_db()
        assert item.status == EmailStatus.FAILED
        assert item.error_message == STALE_MESSAGE

    def test_inactive_template_fails_item(self, assignment):
        EmailTemplate.objects.filter(template_key="lesson_available").update(is_active=False)
        item = queue_item(assignment)
        client = FakeResendClient()

        summary = email_queue_service.process_queue(client=client)

        assert summary.skipped == 1
        assert client.batches == []
        item.refresh_from_db()
        assert item.status == EmailStatus.FAILED
        assert "inactive or not found" in item.error_message

    def test_resend_error_retries_then_fails(self, assignment):
        item = queue_item(assignment)
        client = FakeResendClient(error=ResendError("boom", status_code=500, body="upstream down"))

        for attempt in range(1, MAX_RETRIES + 1):
            summary = email_queue_service.process_queue(client=client)
            assert summary.failed == 1
            item.refresh_from_db()
            assert item.retry_count == attempt

        assert item.status == EmailStatus.FAILED
        assert item.error_message.startswith("Resend API error: 500")
        assert len(client.batches) == MAX_RETRIES

        # Exhausted rows are no longer picked up
        assert email_queue_service.process_queue(client=client).processed == 0

    def test_first_failure_stays_pending(self, assignment):
        item = queue_item(assignment)
        client = FakeResendClient(error=ResendError("boom", status_code=429, body="rate limited"))

        summary = email_queue_service.process_queue(client=client)

        item.refresh_from_db()
        assert item.status == EmailStatus.PENDING
        assert summary.errors == [{"id": str(item.id), "error": "API error: 429"}]
