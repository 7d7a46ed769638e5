"""
Sales Experience email queue processor.

Drains due EmailQueueItems through the Resend batch API:
1. Pending rows older than 24 hours are marked failed (stale) so outdated
   reminders are never sent after an outage
2. Up to BATCH_SIZE due rows are rendered from their template + variables
3. Rows whose template is missing or inactive are marked failed
4. The rest go out in one batch; API failures bump retry_count and the row
   fails permanently after MAX_RETRIES
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from django.utils import timezone
from django.utils.html import escape

from agencybrain.integrations.resend_client import (
    EmailSendingDisabledError,
    OutgoingEmail,
    ResendClient,
    ResendError,
    get_client,
    require_email_enabled,
)
from agencybrain.sales_experience.enums import EmailStatus
from agencybrain.sales_experience.models import EmailQueueItem, EmailTemplate

logger = logging.getLogger("agencybrain.email")

MAX_RETRIES = 3
BATCH_SIZE = 50
STALE_AFTER = timedelta(hours=24)

STALE_MESSAGE = "Stale email - older than 24 hours, skipped to prevent outdated content"

_IF_OPEN_RE = re.compile(r"\{\{#if[^}]*\}\}")
_IF_CLOSE_RE = re.compile(r"\{\{/if\}\}")
_LEFTOVER_RE = re.compile(r"\{\{[^}]+\}\}")


@dataclass
class QueueRunSummary:
    processed: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    stale: int = 0
    errors: list[dict[str, str]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "stale": self.stale,
            "errors": self.errors,
        }


# =============================================================================
# RENDERING
# =============================================================================


def substitute(text: str, variables: dict[str, Any], html: bool = False) -> str:
    """Replace every {{key}} with its value, HTML-escaped when `html` is set."""
    for key, value in variables.items():
        value = escape(value) if html else str(value)
        text = text.replace("{{" + key + "}}", value)
    return text


def strip_template_tags(html: str) -> str:
    """Remove {{#if ...}} / {{/if}} markers and any unreplaced {{variables}}."""
    html = _IF_OPEN_RE.sub("", html)
    html = _IF_CLOSE_RE.sub("", html)
    return _LEFTOVER_RE.sub("", html)


def render_item(item: EmailQueueItem, template: EmailTemplate) -> tuple[str, str]:
    """
    Build (subject, html) for a queue row.

    A pre-rendered body on the row wins over the template body.
    """
    variables = item.variables_json or {}
    subject = substitute(item.email_subject or template.subject_template, variables)
    html = substitute(item.email_body_html or template.body_template, variables, html=True)
    return subject, strip_template_tags(html)


# =============================================================================
# PROCESSING
# =============================================================================


def mark_stale(now: datetime) -> int:
    """Fail pending rows created more than 24 hours before `now`."""
    return EmailQueueItem.objects.filter(
        status=EmailStatus.PENDING,
        created_at__lt=now - STALE_AFTER,
        retry_count__lt=MAX_RETRIES,
    ).update(
        status=EmailStatus.FAILED,
        error_message=STALE_MESSAGE,
        updated_at=now,
    )


def due_items(now: datetime) -> list[EmailQueueItem]:
    return list(
        EmailQueueItem.objects.filter(
            status=EmailStatus.PENDING,
            scheduled_for__lte=now,
            retry_count__lt=MAX_RETRIES,
        ).order_by("scheduled_for")[:BATCH_SIZE]
    )


def process_queue(
    now: datetime | None = None,
    client: ResendClient | None = None,
) -> QueueRunSummary:
    """
    Run one pass of the queue.

    Raises:
        EmailSendingDisabledError: if EMAIL_SENDING_ENABLED is off; nothing
            is touched in that case
    """
    require_email_enabled()
    now = now or timezone.now()
    summary = QueueRunSummary()

    summary.stale = mark_stale(now)
    if summary.stale:
        logger.info("Marked %d stale emails as failed", summary.stale)

    items = due_items(now)
    summary.processed = len(items)
    if not items:
        logger.info("No pending emails to process")
        return summary

    templates = {
        t.template_key: t
        for t in EmailTemplate.objects.filter(template_key__in={i.template_key for i in items})
    }

    to_send: list[tuple[EmailQueueItem, OutgoingEmail]] = []
    for item in items:
        template = templates.get(item.template_key)
        if template is None or not template.is_active:
            logger.info(
                "Skipping email %s: template %s inactive or missing",
                item.id,
                item.template_key,
            )
            item.status = EmailStatus.FAILED
            item.error_message = f"Template '{item.template_key}' is inactive or not found"
            item.save(update_fields=["status", "error_message", "updated_at"])
            summary.skipped += 1
            continue

        subject, html = render_item(item, template)
        to_send.append((item, OutgoingEmail(to=item.recipient_email, subject=subject, html=html)))

    if not to_send:
        return summary

    client = client or get_client()
    try:
        message_ids = client.send_batch([email for _, email in to_send])
    except EmailSendingDisabledError:
        raise
    except ResendError as exc:
        logger.error("Resend batch failed for %d emails: %s", len(to_send), exc)
        for item, _ in to_send:
            item.retry_count += 1
            item.status = EmailStatus.FAILED if item.retry_count >= MAX_RETRIES else EmailStatus.PENDING
            item.error_message = f"Resend API error: {exc.status_code} - {(exc.body or str(exc))[:200]}"
            item.save(update_fields=["retry_count", "status", "error_message", "updated_at"])
            summary.failed += 1
            summary.errors.append({"id": str(item.id), "error": f"API error: {exc.status_code}"})
        return summary

    for (item, _), message_id in zip(to_send, message_ids):
        item.status = EmailStatus.SENT
        item.sent_at = now
        item.resend_message_id = message_id or ""
        item.error_message = ""
        item.save(update_fields=["status", "sent_at", "resend_message_id", "error_message", "updated_at"])
        summary.sent += 1

    logger.info(
        "Email queue pass complete: sent=%d failed=%d skipped=%d stale=%d",
        summary.sent,
        summary.failed,
        summary.skipped,
        summary.stale,
    )
    return summary
