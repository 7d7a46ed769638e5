"""
Sales Experience models.

Hierarchy:
- Agency → has many SalesExperienceAssignments (one active at a time)
- SalesExperienceModule (week 1-8) → has many SalesExperienceLessons (Mon/Wed/Fri)
- Assignment × StaffUser × Lesson → StaffLessonProgress (created lazily)
- Assignment × Profile × Lesson → OwnerLessonProgress
- Assignment → has many QuizAttempts and EmailQueueItems

Curriculum rows (modules, lessons, templates) are shared by every agency.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from django.db import models

from agencybrain.core.models import Agency, Profile, StaffUser, TimestampedModel

from .enums import (
    AssignmentStatus,
    EmailStatus,
    Pillar,
    ProgressStatus,
    RecipientType,
)

PROGRAM_WEEKS = 8
# Inclusive length of the program window: 8 weeks = 56 days
PROGRAM_LENGTH_DAYS = PROGRAM_WEEKS * 7 - 1
LESSON_DAYS = (1, 3, 5)


class ImmutableFieldError(Exception):
    """Raised when saving a change to a field that is frozen in the current state."""

    pass


# =============================================================================
# ASSIGNMENT
# =============================================================================


class SalesExperienceAssignment(TimestampedModel):
    """
    One agency's enrollment in the 8-week program.

    start_date is frozen once the assignment leaves `pending`; moving it
    would re-lock lessons that have already unlocked.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    agency = models.ForeignKey(
        Agency,
        on_delete=models.CASCADE,
        related_name="sales_experience_assignments",
    )
    start_date = models.DateField()
    timezone = models.CharField(max_length=64, default="America/New_York")
    status = models.CharField(
        max_length=16,
        choices=AssignmentStatus.choices,
        default=AssignmentStatus.PENDING,
    )
    notes = models.TextField(blank=True)

    class Meta:
        db_table = "sales_experience_assignments"
        indexes = [
            models.Index(fields=["agency", "status"], name="se_assignment_agency_status"),
        ]

    def __str__(self):
        return f"{self.agency} ({self.status}, starts {self.start_date})"

    @property
    def end_date(self):
        if self.start_date is None:
            return None
        return self.start_date + timedelta(days=PROGRAM_LENGTH_DAYS)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = (
                type(self).objects.filter(pk=self.pk)
                .values("start_date", "status")
                .first()
            )
            if (
                previous is not None
                and previous["status"] != AssignmentStatus.PENDING
                and previous["start_date"] != self.start_date
            ):
                raise ImmutableFieldError(
                    "start_date cannot change once the assignment has left pending"
                )
        super().save(*args, **kwargs)


# =============================================================================
# CURRICULUM
# =============================================================================


class SalesExperienceModule(TimestampedModel):
    """One week of curriculum."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    week_number = models.PositiveSmallIntegerField(unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    pillar = models.CharField(max_length=32, choices=Pillar.choices)
    icon = models.CharField(max_length=64, blank=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = "sales_experience_modules"
        ordering = ["week_number"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(week_number__gte=1, week_number__lte=PROGRAM_WEEKS),
                name="se_module_week_range",
            ),
        ]

    def __str__(self):
        return f"Week {self.week_number}: {self.title}"


class SalesExperienceLesson(TimestampedModel):
    """
    A lesson scheduled on day 1, 3 or 5 of its module's week.

    quiz_questions is a list of
    {id, question, type: multiple_choice|open_ended, options?, correct_answer?, points?}.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    module = models.ForeignKey(
        SalesExperienceModule,
        on_delete=models.CASCADE,
        related_name="lessons",
    )
    day_of_week = models.PositiveSmallIntegerField()
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    video_url = models.URLField(blank=True)
    video_platform = models.CharField(max_length=32, default="vimeo")
    video_thumbnail_url = models.URLField(blank=True)
    content_html = models.TextField(blank=True)
    quiz_questions = models.JSONField(default=list, blank=True)
    is_staff_visible = models.BooleanField(default=True)
    is_discovery_flow = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = "sales_experience_lessons"
        ordering = ["module__week_number", "day_of_week"]
        constraints = [
            models.UniqueConstraint(
                fields=["module", "day_of_week"],
                name="uniq_se_lesson_module_day",
            ),
            models.CheckConstraint(
                condition=models.Q(day_of_week__in=LESSON_DAYS),
                name="se_lesson_day_mon_wed_fri",
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def week_number(self) -> int:
        return self.module.week_number


# =============================================================================
# PROGRESS
# =============================================================================


class LessonProgressBase(TimestampedModel):
    """
    Shared progress fields.

    Rows are created on first interaction and are never deleted; every
    foreign key uses PROTECT.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(
        max_length=16,
        choices=ProgressStatus.choices,
        default=ProgressStatus.LOCKED,
    )
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    video_watched_seconds = models.PositiveIntegerField(default=0)
    video_completed = models.BooleanField(default=False)

    class Meta:
        abstract = True


class StaffLessonProgress(LessonProgressBase):
    """A staff user's progress on one lesson of an assignment."""

    assignment = models.ForeignKey(
        SalesExperienceAssignment,
        on_delete=models.PROTECT,
        related_name="staff_progress",
    )
    staff_user = models.ForeignKey(
        StaffUser,
        on_delete=models.PROTECT,
        related_name="sales_lesson_progress",
    )
    lesson = models.ForeignKey(
        SalesExperienceLesson,
        on_delete=models.PROTECT,
        related_name="staff_progress",
    )
    unlocked_at = models.DateTimeField(null=True, blank=True)
    quiz_score_percent = models.PositiveSmallIntegerField(null=True, blank=True)
    quiz_feedback_ai = models.TextField(blank=True)
    quiz_completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "sales_experience_staff_progress"
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "staff_user", "lesson"],
                name="uniq_se_staff_progress",
            ),
        ]

    def __str__(self):
        return f"{self.staff_user} / {self.lesson} ({self.status})"


class OwnerLessonProgress(LessonProgressBase):
    """An owner or manager's progress on one lesson of an assignment."""

    assignment = models.ForeignKey(
        SalesExperienceAssignment,
        on_delete=models.PROTECT,
        related_name="owner_progress",
    )
    profile = models.ForeignKey(
        Profile,
        on_delete=models.PROTECT,
        related_name="sales_lesson_progress",
    )
    lesson = models.ForeignKey(
        SalesExperienceLesson,
        on_delete=models.PROTECT,
        related_name="owner_progress",
    )
    notes = models.TextField(blank=True)

    class Meta:
        db_table = "sales_experience_owner_progress"
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "profile", "lesson"],
                name="uniq_se_owner_progress",
            ),
        ]

    def __str__(self):
        return f"{self.profile} / {self.lesson} ({self.status})"


class QuizAttempt(models.Model):
    """One graded quiz submission. attempt_number counts from 1 per lesson."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        SalesExperienceAssignment,
        on_delete=models.PROTECT,
        related_name="quiz_attempts",
    )
    staff_user = models.ForeignKey(
        StaffUser,
        on_delete=models.PROTECT,
        related_name="sales_quiz_attempts",
    )
    lesson = models.ForeignKey(
        SalesExperienceLesson,
        on_delete=models.PROTECT,
        related_name="quiz_attempts",
    )
    attempt_number = models.PositiveIntegerField(default=1)
    answers_json = models.JSONField(default=list)
    score_percent = models.PositiveSmallIntegerField()
    feedback_ai = models.TextField(blank=True)
    started_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "sales_experience_quiz_attempts"
        ordering = ["attempt_number"]

    def __str__(self):
        return f"Attempt {self.attempt_number} on {self.lesson} ({self.score_percent}%)"


# =============================================================================
# EMAIL
# =============================================================================


class EmailTemplate(models.Model):
    """
    Email template keyed by template_key.

    subject_template and body_template use {{variable}} placeholders.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template_key = models.CharField(max_length=64, unique=True)
    template_name = models.CharField(max_length=255)
    subject_template = models.CharField(max_length=255)
    body_template = models.TextField()
    variables_available = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sales_experience_email_templates"

    def __str__(self):
        return self.template_key


class EmailQueueItem(TimestampedModel):
    """
    An outbound email waiting for the queue processor.

    Reminder rows carry variables and are rendered at send time; quiz
    notifications carry a pre-rendered body.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        SalesExperienceAssignment,
        on_delete=models.CASCADE,
        related_name="email_queue",
    )
    lesson = models.ForeignKey(
        SalesExperienceLesson,
        on_delete=models.SET_NULL,
        related_name="queued_emails",
        null=True,
        blank=True,
    )
    template_key = models.CharField(max_length=64)
    recipient_email = models.EmailField()
    recipient_name = models.CharField(max_length=255, blank=True)
    recipient_type = models.CharField(
        max_length=16,
        choices=RecipientType.choices,
        default=RecipientType.STAFF,
    )
    scheduled_for = models.DateTimeField()
    email_subject = models.CharField(max_length=255)
    email_body_html = models.TextField(blank=True)
    variables_json = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=16,
        choices=EmailStatus.choices,
        default=EmailStatus.PENDING,
    )
    retry_count = models.PositiveSmallIntegerField(default=0)
    sent_at = models.DateTimeField(null=True, blank=True)
    resend_message_id = models.CharField(max_length=255, blank=True)
    error_message = models.TextField(blank=True)

    class Meta:
        db_table = "sales_experience_email_queue"
        indexes = [
            models.Index(fields=["status", "scheduled_for"], name="se_email_queue_due"),
        ]
        constraints = [
            # A lesson reminder goes to each recipient at most once
            models.UniqueConstraint(
                fields=["assignment", "lesson", "recipient_email", "template_key"],
                condition=models.Q(lesson__isnull=False),
                name="uniq_se_email_per_lesson_recipient",
            ),
        ]

    def __str__(self):
        return f"{self.template_key} → {self.recipient_email} ({self.status})"
