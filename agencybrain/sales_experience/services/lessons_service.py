"""
Sales Lessons Service.

Builds the time-gated lesson listings for staff and owners and records
lesson progress. Every unlock decision goes through the shared business-day
calculator in agencybrain.scheduling, evaluated in the assignment's timezone.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from agencybrain.core.exceptions import ForbiddenError, NotFoundError
from agencybrain.core.utils import round_percent
from agencybrain.scheduling import (
    ScheduleState,
    compute_schedule,
    is_lesson_unlocked,
    local_today,
)
from agencybrain.sales_experience.dto import (
    AssignmentSummaryDTO,
    LessonDTO,
    LessonProgressDTO,
    LessonProgressRequestDTO,
    LessonProgressResponseDTO,
    LessonsOverviewDTO,
    ProgressTotalsDTO,
    WeekDTO,
)
from agencybrain.sales_experience.enums import AssignmentStatus, ProgressStatus
from agencybrain.sales_experience.models import (
    PROGRAM_WEEKS,
    OwnerLessonProgress,
    SalesExperienceAssignment,
    SalesExperienceLesson,
    SalesExperienceModule,
    StaffLessonProgress,
)

if TYPE_CHECKING:
    from agencybrain.core.models import Profile, StaffUser

logger = logging.getLogger(__name__)

DEFAULT_STAFF_NAME = "Team Member"


class LessonLockedError(ForbiddenError):
    """Raised when acting on a lesson that has not unlocked yet."""

    code = "lesson_locked"


# =============================================================================
# ASSIGNMENT + SCHEDULE
# =============================================================================


def find_assignment(agency_id: UUID | None) -> SalesExperienceAssignment | None:
    """
    The assignment an agency's curriculum is evaluated against.

    Prefers the most recent active assignment, then the most recent one of
    any status.
    """
    if agency_id is None:
        return None

    assignments = SalesExperienceAssignment.objects.filter(agency_id=agency_id).order_by("-created_at")
    return assignments.filter(status=AssignmentStatus.ACTIVE).first() or assignments.first()


def schedule_for(
    assignment: SalesExperienceAssignment,
    now: datetime | None = None,
) -> ScheduleState:
    """
    Compute the assignment's program position on the agency-local date of `now`.

    Raises:
        InvalidDate: if the stored start_date is unusable
    """
    today = local_today(assignment.timezone, now=now)
    return compute_schedule(
        assignment.start_date,
        today,
        status=assignment.status,
        max_weeks=PROGRAM_WEEKS,
    )


def complete_if_elapsed(
    assignment: SalesExperienceAssignment,
    now: datetime | None = None,
) -> bool:
    """
    Move an active assignment to completed once its program window has ended.

    The window ends on end_date in the assignment's timezone.

    Returns:
        True when the assignment was completed by this call
    """
    if assignment.status != AssignmentStatus.ACTIVE:
        return False
    if local_today(assignment.timezone, now=now) <= assignment.end_date:
        return False

    assignment.status = AssignmentStatus.COMPLETED
    assignment.save(update_fields=["status", "updated_at"])
    logger.info("Assignment %s completed (window ended %s)", assignment.id, assignment.end_date)
    return True


# =============================================================================
# LISTING
# =============================================================================


def _effective_status(stored: str | None, unlocked: bool) -> ProgressStatus:
    status = ProgressStatus(stored) if stored else ProgressStatus.LOCKED
    if status == ProgressStatus.LOCKED and unlocked:
        return ProgressStatus.AVAILABLE
    return status


def _progress_dto(row, unlocked: bool) -> LessonProgressDTO:
    if row is None:
        return LessonProgressDTO(status=_effective_status(None, unlocked))

    return LessonProgressDTO(
        status=_effective_status(row.status, unlocked),
        unlocked_at=getattr(row, "unlocked_at", None),
        started_at=row.started_at,
        completed_at=row.completed_at,
        video_watched_seconds=row.video_watched_seconds or 0,
        video_completed=row.video_completed,
        quiz_score_percent=getattr(row, "quiz_score_percent", None),
        quiz_feedback_ai=getattr(row, "quiz_feedback_ai", "") or None,
        quiz_completed_at=getattr(row, "quiz_completed_at", None),
    )


def lesson_to_dto(
    lesson: SalesExperienceLesson,
    state: ScheduleState,
    progress_row=None,
) -> LessonDTO:
    """Serialize a lesson, hiding its content until it unlocks."""
    week_number = lesson.module.week_number
    unlocked = is_lesson_unlocked(state, week_number, lesson.day_of_week)

    return LessonDTO(
        id=lesson.id,
        module_id=lesson.module_id,
        week_number=week_number,
        day_of_week=lesson.day_of_week,
        title=lesson.title,
        description=lesson.description,
        video_url=(lesson.video_url or None) if unlocked else None,
        video_platform=lesson.video_platform or None,
        video_thumbnail_url=lesson.video_thumbnail_url or None,
        content_html=(lesson.content_html or None) if unlocked else None,
        quiz_questions=lesson.quiz_questions if unlocked else None,
        is_discovery_flow=lesson.is_discovery_flow,
        is_unlocked=unlocked,
        progress=_progress_dto(progress_row, unlocked),
    )


def build_overview(
    assignment: SalesExperienceAssignment,
    lessons: Iterable[SalesExperienceLesson],
    progress_by_lesson: dict,
    state: ScheduleState,
    staff_name: str | None = None,
) -> LessonsOverviewDTO:
    """Group lessons by week and compute progress totals."""
    lesson_dtos = [
        lesson_to_dto(lesson, state, progress_by_lesson.get(lesson.id))
        for lesson in lessons
    ]

    by_week: dict[int, list[LessonDTO]] = {}
    for dto in lesson_dtos:
        by_week.setdefault(dto.week_number, []).append(dto)

    weeks = []
    for module in SalesExperienceModule.objects.order_by("week_number"):
        week_lessons = by_week.get(module.week_number, [])
        weeks.append(
            WeekDTO(
                week_number=module.week_number,
                title=module.title,
                description=module.description,
                pillar=module.pillar,
                icon=module.icon,
                lessons=week_lessons,
                is_current=module.week_number == state.current_week,
                is_completed=bool(week_lessons)
                and all(l.progress.status == ProgressStatus.COMPLETED for l in week_lessons),
            )
        )

    completed = sum(1 for l in lesson_dtos if l.progress.status == ProgressStatus.COMPLETED)
    todays_lesson = next(
        (
            l for l in lesson_dtos
            if l.is_unlocked and l.progress.status != ProgressStatus.COMPLETED
        ),
        None,
    )

    return LessonsOverviewDTO(
        has_assignment=True,
        assignment=AssignmentSummaryDTO(
            id=assignment.id,
            status=assignment.status,
            start_date=assignment.start_date,
            end_date=assignment.end_date,
            timezone=assignment.timezone,
        ),
        **state.as_response_fields(),
        weeks=weeks,
        todays_lesson=todays_lesson,
        progress=ProgressTotalsDTO(
            total_lessons=len(lesson_dtos),
            completed_lessons=completed,
            progress_percent=round_percent(completed, len(lesson_dtos)),
        ),
        staff_name=staff_name,
    )


def _ordered_lessons(**filters):
    return (
        SalesExperienceLesson.objects.select_related("module")
        .filter(**filters)
        .order_by("module__week_number", "day_of_week")
    )


def get_staff_overview(
    staff_user: StaffUser,
    agency_id: UUID | None,
    now: datetime | None = None,
) -> LessonsOverviewDTO:
    """Staff-visible lessons with this staff user's progress."""
    assignment = find_assignment(agency_id)
    if assignment is None:
        return LessonsOverviewDTO(has_assignment=False)

    state = schedule_for(assignment, now=now)
    progress_by_lesson = {
        row.lesson_id: row
        for row in StaffLessonProgress.objects.filter(assignment=assignment, staff_user=staff_user)
    }

    return build_overview(
        assignment,
        _ordered_lessons(is_staff_visible=True),
        progress_by_lesson,
        state,
        staff_name=staff_user.display_name or DEFAULT_STAFF_NAME,
    )


def get_owner_overview(
    profile: Profile,
    agency_id: UUID | None,
    now: datetime | None = None,
) -> LessonsOverviewDTO:
    """Every lesson, including owner-only ones, with the owner's progress."""
    assignment = find_assignment(agency_id)
    if assignment is None:
        return LessonsOverviewDTO(has_assignment=False)

    state = schedule_for(assignment, now=now)
    progress_by_lesson = {
        row.lesson_id: row
        for row in OwnerLessonProgress.objects.filter(assignment=assignment, profile=profile)
    }

    return build_overview(assignment, _ordered_lessons(), progress_by_lesson, state)


# =============================================================================
# PROGRESS
# =============================================================================


def get_unlocked_staff_lesson(
    agency_id: UUID | None,
    lesson_id: UUID,
    now: datetime | None = None,
) -> tuple[SalesExperienceAssignment, SalesExperienceLesson]:
    """
    Resolve the assignment and a staff-visible lesson, enforcing the time gate.

    Raises:
        NotFoundError: no assignment for the agency, or unknown lesson
        LessonLockedError: the lesson has not unlocked yet
    """
    assignment = find_assignment(agency_id)
    if assignment is None:
        raise NotFoundError("No active assignment found")

    lesson = _ordered_lessons(id=lesson_id, is_staff_visible=True).first()
    if lesson is None:
        raise NotFoundError("Lesson not found")

    state = schedule_for(assignment, now=now)
    if not is_lesson_unlocked(state, lesson.module.week_number, lesson.day_of_week):
        raise LessonLockedError("This lesson is not yet available")

    return assignment, lesson


def record_staff_progress(
    staff_user: StaffUser,
    agency_id: UUID | None,
    request: LessonProgressRequestDTO,
    now: datetime | None = None,
) -> LessonProgressResponseDTO:
    """
    Start or complete a lesson for a staff user.

    The progress row is created on first touch. Completing never moves a
    lesson back to in_progress.
    """
    now = now or timezone.now()
    assignment, lesson = get_unlocked_staff_lesson(agency_id, request.lesson_id, now=now)

    with transaction.atomic():
        progress, created = (
            StaffLessonProgress.objects.select_for_update()
            .get_or_create(
                assignment=assignment,
                staff_user=staff_user,
                lesson=lesson,
                defaults={"status": ProgressStatus.AVAILABLE, "unlocked_at": now},
            )
        )

        if progress.unlocked_at is None:
            progress.unlocked_at = now
        if progress.started_at is None:
            progress.started_at = now

        if request.action == "complete":
            progress.status = ProgressStatus.COMPLETED
            progress.completed_at = progress.completed_at or now
            if lesson.video_url:
                progress.video_completed = True
        elif progress.status != ProgressStatus.COMPLETED:
            progress.status = ProgressStatus.IN_PROGRESS

        if request.video_watched_seconds is not None:
            progress.video_watched_seconds = max(
                progress.video_watched_seconds, request.video_watched_seconds
            )

        progress.save()

    logger.info(
        "Lesson progress recorded: staff=%s lesson=%s action=%s created=%s",
        staff_user.id,
        lesson.id,
        request.action,
        created,
    )

    return LessonProgressResponseDTO(
        lesson_id=lesson.id,
        progress=_progress_dto(progress, unlocked=True),
    )
