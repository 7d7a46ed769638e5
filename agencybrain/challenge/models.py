"""
Challenge models.

Hierarchy:
- ChallengeProduct → has many ChallengeModules (week 1-6), ChallengeLessons
  (business day 1-30) and ChallengeSundayModules (Sunday 0-6)
- StaffUser → has many ChallengeAssignments, each for one product
- Assignment × Lesson → ChallengeProgress (created lazily)
- Assignment → has many ChallengeSundayResponses
- StaffUser → has many Core4Entries (one per calendar date)
- StaffUser → has many StaffFlowSessions (guided flows such as discovery)

Lesson week_number and day_of_week are derived from day_number on save:
day 1 is week 1 Monday, day 6 is week 2 Monday.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from django.db import models

from agencybrain.core.models import StaffUser, TimestampedModel

from .enums import ChallengeAssignmentStatus, ChallengeProgressStatus, FlowSessionStatus

LESSONS_PER_WEEK = 5


# =============================================================================
# CURRICULUM
# =============================================================================


class ChallengeProduct(TimestampedModel):
    """A purchasable challenge program."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    total_lessons = models.PositiveSmallIntegerField(default=30)
    duration_weeks = models.PositiveSmallIntegerField(default=6)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "challenge_products"

    def __str__(self):
        return self.name


class ChallengeModule(TimestampedModel):
    """One week of a challenge product."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        ChallengeProduct,
        on_delete=models.CASCADE,
        related_name="modules",
    )
    name = models.CharField(max_length=255)
    week_number = models.PositiveSmallIntegerField()
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=64, blank=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = "challenge_modules"
        ordering = ["week_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "week_number"],
                name="uniq_challenge_module_week",
            ),
        ]

    def __str__(self):
        return f"Week {self.week_number}: {self.name}"


class ChallengeLesson(TimestampedModel):
    """A lesson pinned to one business day of the challenge."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        ChallengeProduct,
        on_delete=models.CASCADE,
        related_name="lessons",
    )
    module = models.ForeignKey(
        ChallengeModule,
        on_delete=models.SET_NULL,
        related_name="lessons",
        null=True,
        blank=True,
    )
    title = models.CharField(max_length=255)
    day_number = models.PositiveSmallIntegerField()
    week_number = models.PositiveSmallIntegerField(editable=False)
    day_of_week = models.PositiveSmallIntegerField(editable=False)
    video_url = models.URLField(blank=True)
    video_thumbnail_url = models.URLField(blank=True)
    preview_text = models.TextField(blank=True)
    content_html = models.TextField(blank=True)
    questions = models.JSONField(default=list, blank=True)
    action_items = models.JSONField(default=list, blank=True)
    is_discovery_flow = models.BooleanField(
        default=False,
        help_text="Friday lesson completed by running a discovery flow",
    )

    class Meta:
        db_table = "challenge_lessons"
        ordering = ["day_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "day_number"],
                name="uniq_challenge_lesson_day",
            ),
            models.CheckConstraint(
                condition=models.Q(day_number__gte=1),
                name="challenge_lesson_day_positive",
            ),
        ]

    def __str__(self):
        return f"Day {self.day_number}: {self.title}"

    def save(self, *args, **kwargs):
        self.week_number = (self.day_number - 1) // LESSONS_PER_WEEK + 1
        self.day_of_week = (self.day_number - 1) % LESSONS_PER_WEEK + 1
        super().save(*args, **kwargs)


class ChallengeSundayModule(TimestampedModel):
    """
    Weekend reflection module.

    Sunday 0 is the kickoff before week 1; Sunday N follows week N.
    Modules with a rating section ask the staff member to score last week's
    Core 4 commitments.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        ChallengeProduct,
        on_delete=models.CASCADE,
        related_name="sunday_modules",
    )
    sunday_number = models.PositiveSmallIntegerField()
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    video_url = models.URLField(blank=True)
    has_rating_section = models.BooleanField(default=False)
    has_commitment_section = models.BooleanField(default=True)

    class Meta:
        db_table = "challenge_sunday_modules"
        ordering = ["sunday_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "sunday_number"],
                name="uniq_challenge_sunday_module",
            ),
            models.CheckConstraint(
                condition=models.Q(sunday_number__gte=0, sunday_number__lte=6),
                name="challenge_sunday_number_range",
            ),
        ]

    def __str__(self):
        return f"Sunday {self.sunday_number}: {self.title}"


# =============================================================================
# ENROLLMENT + PROGRESS
# =============================================================================


class ChallengeAssignment(TimestampedModel):
    """One staff member's run through a challenge product."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff_user = models.ForeignKey(
        StaffUser,
        on_delete=models.CASCADE,
        related_name="challenge_assignments",
    )
    product = models.ForeignKey(
        ChallengeProduct,
        on_delete=models.PROTECT,
        related_name="assignments",
    )
    start_date = models.DateField()
    timezone = models.CharField(max_length=64, default="America/New_York")
    status = models.CharField(
        max_length=16,
        choices=ChallengeAssignmentStatus.choices,
        default=ChallengeAssignmentStatus.PENDING,
    )

    class Meta:
        db_table = "challenge_assignments"
        indexes = [
            models.Index(fields=["staff_user", "status"], name="challenge_assign_staff_status"),
        ]

    def __str__(self):
        return f"{self.staff_user} in {self.product} from {self.start_date}"

    @property
    def end_date(self):
        """Last calendar day of the program window (six weeks inclusive)."""
        return self.start_date + timedelta(days=self.product.duration_weeks * 7 - 1)


class ChallengeProgress(TimestampedModel):
    """A staff member's progress on one challenge lesson. Never hard-deleted."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        ChallengeAssignment,
        on_delete=models.PROTECT,
        related_name="progress",
    )
    lesson = models.ForeignKey(
        ChallengeLesson,
        on_delete=models.PROTECT,
        related_name="progress",
    )
    status = models.CharField(
        max_length=16,
        choices=ChallengeProgressStatus.choices,
        default=ChallengeProgressStatus.LOCKED,
    )
    unlocked_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    video_watched_seconds = models.PositiveIntegerField(default=0)
    video_completed = models.BooleanField(default=False)
    reflection_response = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "challenge_progress"
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "lesson"],
                name="uniq_challenge_progress",
            ),
        ]


class ChallengeSundayResponse(TimestampedModel):
    """Answers to a Sunday module: last week's ratings and next week's commitments."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        ChallengeAssignment,
        on_delete=models.CASCADE,
        related_name="sunday_responses",
    )
    sunday_number = models.PositiveSmallIntegerField()
    rating_body = models.PositiveSmallIntegerField(null=True, blank=True)
    rating_being = models.PositiveSmallIntegerField(null=True, blank=True)
    rating_balance = models.PositiveSmallIntegerField(null=True, blank=True)
    rating_business = models.PositiveSmallIntegerField(null=True, blank=True)
    commitment_body = models.TextField(blank=True, null=True)
    commitment_being = models.TextField(blank=True, null=True)
    commitment_balance = models.TextField(blank=True, null=True)
    commitment_business = models.TextField(blank=True, null=True)
    final_reflection = models.TextField(blank=True)

    class Meta:
        db_table = "challenge_sunday_responses"
        ordering = ["sunday_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "sunday_number"],
                name="uniq_challenge_sunday_response",
            ),
        ]


class Core4Entry(TimestampedModel):
    """One day of a staff member's Core 4 habits: body, being, balance, business."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff_user = models.ForeignKey(
        StaffUser,
        on_delete=models.CASCADE,
        related_name="core4_entries",
    )
    date = models.DateField()
    body_completed = models.BooleanField(default=False)
    being_completed = models.BooleanField(default=False)
    balance_completed = models.BooleanField(default=False)
    business_completed = models.BooleanField(default=False)

    class Meta:
        db_table = "staff_core4_entries"
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(
                fields=["staff_user", "date"],
                name="uniq_core4_entry_per_day",
            ),
        ]

    def __str__(self):
        return f"Core 4 for {self.staff_user} on {self.date}"

    @property
    def is_complete(self) -> bool:
        return (
            self.body_completed
            and self.being_completed
            and self.balance_completed
            and self.business_completed
        )


# =============================================================================
# FLOW SESSIONS
# =============================================================================


DISCOVERY_FLOW_SLUG = "discovery"


class StaffFlowSession(TimestampedModel):
    """
    One run of a guided flow (e.g. the discovery flow) by a staff member.

    Discovery-flow lessons count as done once a discovery session is
    completed on or after the lesson's unlock date.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff_user = models.ForeignKey(
        StaffUser,
        on_delete=models.CASCADE,
        related_name="flow_sessions",
    )
    flow_slug = models.SlugField(max_length=64)
    status = models.CharField(
        max_length=16,
        choices=FlowSessionStatus.choices,
        default=FlowSessionStatus.IN_PROGRESS,
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "staff_flow_sessions"
        indexes = [
            models.Index(fields=["staff_user", "flow_slug", "status"], name="flow_session_staff_slug"),
        ]

    def __str__(self):
        return f"{self.flow_slug} flow for {self.staff_user} ({self.status})"
