"""
Challenge Service.

Builds the staff member's 6-Week Challenge dashboard: time-gated lessons,
weekly modules, Sunday reflection modules and the Core 4 habit streak.

Lessons are pinned to business days, so a lesson unlocks once the
assignment's business-day count (agency-local, via the shared calculator)
reaches its day_number. Sunday modules unlock on calendar days instead:
Sunday 0 immediately, Sunday N on start_date + 7N - 1.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable

from agencybrain.core.utils import round_percent
from agencybrain.scheduling import (
    ScheduleState,
    business_day_date,
    compute_schedule,
    local_today,
    parse_start_date,
)

from .dto import (
    ChallengeAssignmentDTO,
    ChallengeLessonDTO,
    ChallengeLessonProgressDTO,
    ChallengeModuleDTO,
    ChallengeOverviewDTO,
    ChallengeProductDTO,
    ChallengeProgressTotalsDTO,
    CommitmentsDTO,
    Core4DayDTO,
    Core4SummaryDTO,
    SundayModuleDTO,
    SundayResponseDTO,
)
from .enums import VISIBLE_ASSIGNMENT_STATUSES, ChallengeProgressStatus, FlowSessionStatus
from .models import (
    DISCOVERY_FLOW_SLUG,
    ChallengeAssignment,
    ChallengeLesson,
    ChallengeModule,
    ChallengeProgress,
    ChallengeSundayModule,
    ChallengeSundayResponse,
    Core4Entry,
    StaffFlowSession,
)

if TYPE_CHECKING:
    from agencybrain.core.models import StaffUser

logger = logging.getLogger(__name__)

CORE4_STREAK_WINDOW = 30


# =============================================================================
# PURE HELPERS
# =============================================================================


def sunday_unlock_date(start_date: date, sunday_number: int) -> date | None:
    """Calendar date Sunday module N opens. Sunday 0 has no gate (None)."""
    if sunday_number == 0:
        return None
    return start_date + timedelta(days=sunday_number * 7 - 1)


def is_sunday_unlocked(start_date: date, sunday_number: int, today: date) -> bool:
    unlock_date = sunday_unlock_date(start_date, sunday_number)
    return unlock_date is None or today >= unlock_date


def core4_streak(entries: Iterable[Core4Entry]) -> int:
    """
    Count consecutive fully-complete days, newest first.

    `entries` must be ordered newest first; the first incomplete entry ends
    the streak.
    """
    streak = 0
    for entry in entries:
        if not entry.is_complete:
            break
        streak += 1
    return streak


def is_challenge_lesson_unlocked(state: ScheduleState, day_number: int) -> bool:
    return state.all_unlocked or day_number <= state.business_days_elapsed


# =============================================================================
# SERIALIZATION
# =============================================================================


def _effective_status(stored: str | None, unlocked: bool) -> ChallengeProgressStatus:
    status = ChallengeProgressStatus(stored) if stored else ChallengeProgressStatus.LOCKED
    if status == ChallengeProgressStatus.LOCKED and unlocked:
        return ChallengeProgressStatus.AVAILABLE
    return status


def lesson_to_dto(
    lesson: ChallengeLesson,
    state: ScheduleState,
    start_date: date,
    progress: ChallengeProgress | None = None,
    last_discovery_date: date | None = None,
) -> ChallengeLessonDTO:
    """
    Serialize a lesson for the dashboard.

    last_discovery_date is the agency-local date of the staff member's most
    recent completed discovery flow, if any.
    """
    unlocked = is_challenge_lesson_unlocked(state, lesson.day_number)
    discovery_unlock_date = (
        business_day_date(start_date, lesson.day_number) if lesson.is_discovery_flow else None
    )
    progress_dto = ChallengeLessonProgressDTO(
        status=_effective_status(progress.status if progress else None, unlocked),
        is_unlocked=unlocked,
        is_today=lesson.day_number == state.business_days_elapsed,
    )
    if discovery_unlock_date is not None:
        progress_dto.discovery_flow_completed = (
            last_discovery_date is not None and last_discovery_date >= discovery_unlock_date
        )
    if progress is not None:
        progress_dto.unlocked_at = progress.unlocked_at
        progress_dto.started_at = progress.started_at
        progress_dto.completed_at = progress.completed_at
        progress_dto.video_watched_seconds = progress.video_watched_seconds
        progress_dto.video_completed = progress.video_completed
        progress_dto.reflection_response = progress.reflection_response or {}

    return ChallengeLessonDTO(
        id=lesson.id,
        title=lesson.title,
        day_number=lesson.day_number,
        week_number=lesson.week_number,
        day_of_week=lesson.day_of_week,
        preview_text=lesson.preview_text,
        video_url=(lesson.video_url or None) if unlocked else None,
        video_thumbnail_url=lesson.video_thumbnail_url or None,
        content_html=(lesson.content_html or None) if unlocked else None,
        questions=lesson.questions if unlocked else None,
        action_items=lesson.action_items if unlocked else None,
        is_discovery_flow=lesson.is_discovery_flow,
        discovery_unlock_date=discovery_unlock_date,
        progress=progress_dto,
    )


def _commitments(response: ChallengeSundayResponse) -> CommitmentsDTO:
    return CommitmentsDTO(
        body=response.commitment_body,
        being=response.commitment_being,
        balance=response.commitment_balance,
        business=response.commitment_business,
    )


def _response_dto(response: ChallengeSundayResponse) -> SundayResponseDTO:
    return SundayResponseDTO(
        id=response.id,
        sunday_number=response.sunday_number,
        rating_body=response.rating_body,
        rating_being=response.rating_being,
        rating_balance=response.rating_balance,
        rating_business=response.rating_business,
        commitments=_commitments(response),
        final_reflection=response.final_reflection,
        submitted_at=response.created_at,
    )


def build_sunday_modules(
    modules: Iterable[ChallengeSundayModule],
    responses: dict[int, ChallengeSundayResponse],
    start_date: date,
    today: date,
) -> list[SundayModuleDTO]:
    """
    Sunday modules with unlock state, the saved response and, for rating
    modules, the commitments made the Sunday before.
    """
    result = []
    for module in modules:
        response = responses.get(module.sunday_number)

        previous = None
        if module.has_rating_section and module.sunday_number > 0:
            prev_response = responses.get(module.sunday_number - 1)
            if prev_response is not None:
                previous = _commitments(prev_response)

        result.append(
            SundayModuleDTO(
                id=module.id,
                sunday_number=module.sunday_number,
                title=module.title,
                description=module.description,
                video_url=module.video_url,
                has_rating_section=module.has_rating_section,
                has_commitment_section=module.has_commitment_section,
                is_unlocked=is_sunday_unlocked(start_date, module.sunday_number, today),
                is_completed=response is not None,
                response=_response_dto(response) if response is not None else None,
                previous_commitments=previous,
            )
        )
    return result


def build_core4_summary(staff_user: StaffUser, today: date) -> Core4SummaryDTO:
    recent = list(
        Core4Entry.objects.filter(staff_user=staff_user).order_by("-date")[:CORE4_STREAK_WINDOW]
    )
    today_entry = next((e for e in recent if e.date == today), None)
    if today_entry is None:
        today_entry = Core4Entry.objects.filter(staff_user=staff_user, date=today).first()

    today_dto = Core4DayDTO()
    if today_entry is not None:
        today_dto = Core4DayDTO(
            body=today_entry.body_completed,
            being=today_entry.being_completed,
            balance=today_entry.balance_completed,
            business=today_entry.business_completed,
        )

    return Core4SummaryDTO(today=today_dto, streak=core4_streak(recent))


# =============================================================================
# DASHBOARD
# =============================================================================


def find_assignment(staff_user: StaffUser) -> ChallengeAssignment | None:
    """The staff member's most recent assignment that is still shown."""
    return (
        ChallengeAssignment.objects.select_related("product")
        .filter(staff_user=staff_user, status__in=VISIBLE_ASSIGNMENT_STATUSES)
        .order_by("-created_at")
        .first()
    )


def last_discovery_completion(staff_user: StaffUser, timezone_name: str) -> date | None:
    """Agency-local date of the staff member's latest completed discovery flow."""
    completed_at = (
        StaffFlowSession.objects.filter(
            staff_user=staff_user,
            flow_slug=DISCOVERY_FLOW_SLUG,
            status=FlowSessionStatus.COMPLETED,
            completed_at__isnull=False,
        )
        .order_by("-completed_at")
        .values_list("completed_at", flat=True)
        .first()
    )
    if completed_at is None:
        return None
    return local_today(timezone_name, now=completed_at)


def get_staff_challenge(
    staff_user: StaffUser,
    now: datetime | None = None,
) -> ChallengeOverviewDTO:
    """
    Build the challenge dashboard for a staff member.

    Raises:
        InvalidDate: if the assignment's start_date is unusable
    """
    assignment = find_assignment(staff_user)
    if assignment is None:
        return ChallengeOverviewDTO(has_assignment=False)

    product = assignment.product
    start_date = parse_start_date(assignment.start_date)
    today = local_today(assignment.timezone, now=now)
    state = compute_schedule(
        start_date,
        today,
        status=assignment.status,
        max_weeks=product.duration_weeks,
    )

    progress_by_lesson = {
        row.lesson_id: row
        for row in ChallengeProgress.objects.filter(assignment=assignment)
    }
    product_lessons = list(ChallengeLesson.objects.filter(product=product).order_by("day_number"))
    last_discovery_date = None
    if any(lesson.is_discovery_flow for lesson in product_lessons):
        last_discovery_date = last_discovery_completion(staff_user, assignment.timezone)

    lessons = [
        lesson_to_dto(
            lesson,
            state,
            start_date,
            progress_by_lesson.get(lesson.id),
            last_discovery_date=last_discovery_date,
        )
        for lesson in product_lessons
    ]

    completed = sum(1 for l in lessons if l.progress.status == ChallengeProgressStatus.COMPLETED)
    todays_lesson = next((l for l in lessons if l.progress.is_today), None)

    modules = [
        ChallengeModuleDTO(
            id=m.id,
            name=m.name,
            week_number=m.week_number,
            description=m.description,
            icon=m.icon,
        )
        for m in ChallengeModule.objects.filter(product=product).order_by("week_number")
    ]

    responses = {
        r.sunday_number: r
        for r in ChallengeSundayResponse.objects.filter(assignment=assignment)
    }
    sunday_modules = build_sunday_modules(
        ChallengeSundayModule.objects.filter(product=product).order_by("sunday_number"),
        responses,
        start_date,
        today,
    )

    logger.debug(
        "Challenge dashboard: staff=%s assignment=%s business_day=%d",
        staff_user.id,
        assignment.id,
        state.business_days_elapsed,
    )

    return ChallengeOverviewDTO(
        has_assignment=True,
        assignment=ChallengeAssignmentDTO(
            id=assignment.id,
            status=assignment.status,
            start_date=start_date,
            end_date=assignment.end_date,
            timezone=assignment.timezone,
            product=ChallengeProductDTO(
                id=product.id,
                name=product.name,
                slug=product.slug,
                description=product.description,
                total_lessons=product.total_lessons,
                duration_weeks=product.duration_weeks,
            ),
        ),
        program_started=state.program_started,
        current_business_day=state.business_days_elapsed,
        todays_lesson=todays_lesson,
        modules=modules,
        lessons=lessons,
        progress=ChallengeProgressTotalsDTO(
            total_lessons=len(lessons),
            completed_lessons=completed,
            progress_percent=round_percent(completed, len(lessons)),
        ),
        core4=build_core4_summary(staff_user, today),
        sunday_modules=sunday_modules,
    )
