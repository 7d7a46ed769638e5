"""
Lesson reminder job.

For every active assignment, at 07:00 agency-local time on Monday, Wednesday
and Friday, finds the staff-visible lesson scheduled for that date and queues
a `lesson_available` email for each agency recipient:
- active staff users (via their team member email)
- active owner profiles
- active key employee profiles
- team members with the manager role

Recipients are deduplicated by lowercase email; placeholder staff addresses
are never mailed. A recipient is queued at most once per lesson.

Active assignments whose program window has ended are marked completed
and get no reminder.

Force-test mode skips the time gates, picks the next upcoming lesson when
none is scheduled today, and mails only the given test address.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from agencybrain.core.enums import ProfileRole, TeamMemberRole
from agencybrain.core.exceptions import NotFoundError
from agencybrain.core.models import Profile, StaffUser, TeamMember
from agencybrain.scheduling import local_now, parse_start_date, scheduled_lesson_date
from agencybrain.sales_experience.enums import AssignmentStatus, RecipientType
from agencybrain.sales_experience.models import (
    EmailQueueItem,
    EmailTemplate,
    SalesExperienceAssignment,
    SalesExperienceLesson,
)
from agencybrain.sales_experience.services.lessons_service import complete_if_elapsed

logger = logging.getLogger(__name__)

TEMPLATE_KEY = "lesson_available"
SEND_HOUR = 7
# datetime.isoweekday(): Monday=1 ... Sunday=7
LESSON_WEEKDAYS = (1, 3, 5)
DAY_NAMES = {1: "Monday", 3: "Wednesday", 5: "Friday"}
PLACEHOLDER_EMAIL_SUFFIX = "@staff.placeholder"


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str
    type: RecipientType


@dataclass
class ReminderOutcome:
    assignment_id: UUID
    agency_id: UUID
    status: str
    lesson_title: str | None = None
    queued: int = 0
    error: str | None = None


def day_name(day_of_week: int) -> str:
    return DAY_NAMES.get(day_of_week, "Unknown")


def lesson_url(recipient_type: str, week_number: int) -> str:
    base = settings.APP_BASE_URL.rstrip("/")
    if recipient_type == RecipientType.STAFF:
        return f"{base}/staff/sales-training/week/{week_number}"
    return f"{base}/sales-experience/week/{week_number}"


def _is_mailable(email: str | None) -> bool:
    return bool(email) and not email.lower().endswith(PLACEHOLDER_EMAIL_SUFFIX)


def collect_recipients(agency_id: UUID) -> list[Recipient]:
    """
    Everyone at the agency who should hear about a new lesson.

    Later sources overwrite earlier ones for the same address, except
    managers, who only fill gaps.
    """
    recipients: dict[str, Recipient] = {}

    staff_users = StaffUser.objects.select_related("team_member").filter(
        is_active=True,
        team_member__agency_id=agency_id,
    )
    for staff_user in staff_users:
        email = staff_user.team_member.email
        if not _is_mailable(email):
            continue
        recipients[email.lower()] = Recipient(
            email=email,
            name=staff_user.display_name or staff_user.team_member.name or "Team Member",
            type=RecipientType.STAFF,
        )

    profile_sources = (
        (ProfileRole.OWNER, RecipientType.OWNER, "Agency Owner"),
        (ProfileRole.KEY_EMPLOYEE, RecipientType.KEY_EMPLOYEE, "Key Employee"),
    )
    for role, recipient_type, default_name in profile_sources:
        profiles = Profile.objects.filter(agency_id=agency_id, role=role, is_active=True).exclude(email="")
        for profile in profiles:
            recipients[profile.email.lower()] = Recipient(
                email=profile.email,
                name=profile.full_name or default_name,
                type=recipient_type,
            )

    managers = TeamMember.objects.filter(agency_id=agency_id, role=TeamMemberRole.MANAGER)
    for manager in managers:
        if not _is_mailable(manager.email):
            continue
        recipients.setdefault(
            manager.email.lower(),
            Recipient(email=manager.email, name=manager.name or "Manager", type=RecipientType.MANAGER),
        )

    return list(recipients.values())


def _scheduled_lessons() -> list[tuple[int, SalesExperienceLesson]]:
    lessons = SalesExperienceLesson.objects.select_related("module").filter(is_staff_visible=True)
    # Day offset from the program start, so lessons sort chronologically
    ordered = [
        ((lesson.module.week_number - 1) * 7 + (lesson.day_of_week - 1), lesson)
        for lesson in lessons
    ]
    ordered.sort(key=lambda pair: pair[0])
    return ordered


def find_lesson_for_date(
    start_date,
    local_date,
    lessons: list[tuple[int, SalesExperienceLesson]],
    upcoming: bool = False,
) -> SalesExperienceLesson | None:
    """
    The lesson scheduled on local_date, or with upcoming=True the first one
    on or after it.
    """
    for _, lesson in lessons:
        scheduled = scheduled_lesson_date(start_date, lesson.module.week_number, lesson.day_of_week)
        if scheduled == local_date or (upcoming and scheduled >= local_date):
            return lesson
    return None


def queue_for_assignment(
    assignment: SalesExperienceAssignment,
    template: EmailTemplate,
    lessons: list[tuple[int, SalesExperienceLesson]],
    now: datetime,
    force_test: bool = False,
    test_email: str | None = None,
) -> ReminderOutcome:
    """Apply the time gates to one assignment and queue its reminder emails."""
    outcome = ReminderOutcome(assignment_id=assignment.id, agency_id=assignment.agency_id, status="queued")
    if complete_if_elapsed(assignment, now=now):
        outcome.status = "completed - program ended"
        return outcome

    local = local_now(assignment.timezone, now=now)

    if not force_test and local.hour != SEND_HOUR:
        outcome.status = "skipped - not 7AM"
        return outcome

    if not force_test and local.isoweekday() not in LESSON_WEEKDAYS:
        outcome.status = "skipped - not lesson day"
        return outcome

    start_date = parse_start_date(assignment.start_date)
    local_date = local.date()
    if local_date < start_date:
        outcome.status = "skipped - not started"
        return outcome

    lesson = find_lesson_for_date(start_date, local_date, lessons)
    if lesson is None and force_test:
        lesson = find_lesson_for_date(start_date, local_date, lessons, upcoming=True)
    if lesson is None:
        outcome.status = "skipped - no lesson today"
        return outcome

    outcome.lesson_title = lesson.title

    if force_test:
        recipients = [Recipient(email=test_email, name="Test User", type=RecipientType.STAFF)]
    else:
        recipients = collect_recipients(assignment.agency_id)

    if not recipients:
        outcome.status = "skipped - no recipients"
        return outcome

    week_number = lesson.module.week_number
    subject = template.subject_template.replace("{{lesson_title}}", lesson.title)

    for recipient in recipients:
        _, created = EmailQueueItem.objects.get_or_create(
            assignment=assignment,
            lesson=lesson,
            recipient_email=recipient.email,
            template_key=TEMPLATE_KEY,
            defaults={
                "recipient_name": recipient.name,
                "recipient_type": recipient.type,
                "scheduled_for": now,
                "email_subject": subject,
                "variables_json": {
                    "staff_name": recipient.name,
                    "lesson_title": lesson.title,
                    "week_number": str(week_number),
                    "day_name": day_name(lesson.day_of_week),
                    "lesson_url": lesson_url(recipient.type, week_number),
                },
            },
        )
        if created:
            outcome.queued += 1
        else:
            logger.info("Already queued: %s for lesson %s", recipient.email, lesson.id)

    logger.info(
        "Queued %d reminder emails for assignment %s (%s, week %d %s)",
        outcome.queued,
        assignment.id,
        lesson.title,
        week_number,
        day_name(lesson.day_of_week),
    )
    return outcome


def queue_lesson_reminders(
    now: datetime | None = None,
    force_test: bool = False,
    test_email: str | None = None,
    agency_id: UUID | None = None,
) -> list[ReminderOutcome]:
    """
    Run the reminder job across active assignments.

    A failure on one assignment is recorded in its outcome and does not stop
    the others.

    Raises:
        ValueError: force_test without test_email
        NotFoundError: the lesson_available template is missing or inactive
    """
    if force_test and not test_email:
        raise ValueError("force-test mode requires a test email")

    now = now or timezone.now()

    assignments = SalesExperienceAssignment.objects.filter(status=AssignmentStatus.ACTIVE)
    if force_test and agency_id:
        assignments = assignments.filter(agency_id=agency_id)
    assignments = list(assignments)

    if not assignments:
        logger.info("No active assignments found")
        return []

    template = EmailTemplate.objects.filter(template_key=TEMPLATE_KEY, is_active=True).first()
    if template is None:
        raise NotFoundError(f"{TEMPLATE_KEY} template not found or inactive")

    lessons = _scheduled_lessons()
    outcomes = []
    for assignment in assignments:
        try:
            with transaction.atomic():
                outcomes.append(
                    queue_for_assignment(
                        assignment,
                        template,
                        lessons,
                        now,
                        force_test=force_test,
                        test_email=test_email,
                    )
                )
        except Exception as exc:
            logger.exception("Error processing assignment %s", assignment.id)
            outcomes.append(
                ReminderOutcome(
                    assignment_id=assignment.id,
                    agency_id=assignment.agency_id,
                    status="error",
                    error=str(exc),
                )
            )

    return outcomes
