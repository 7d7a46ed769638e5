"""
6-Week Challenge dashboard tests.

Tests verify:
- Business-day lesson gating, today's lesson and content hiding
- Discovery-flow unlock dates and completion
- Sunday module calendar unlocks and carried-over commitments
- Core 4 streak counting
- Assignment status handling
- HTTP contract for GET /api/staff/challenge/
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from agencybrain.challenge import services
from agencybrain.challenge.enums import ChallengeAssignmentStatus, ChallengeProgressStatus, FlowSessionStatus
from agencybrain.challenge.models import (
    DISCOVERY_FLOW_SLUG,
    ChallengeAssignment,
    ChallengeLesson,
    ChallengeProgress,
    ChallengeSundayResponse,
    Core4Entry,
    StaffFlowSession,
)
from agencybrain.core.models import StaffUser
from tests.fixtures import create_challenge_product, today_in

START = date(2024, 1, 1)
# Monday 2024-01-08, noon in New York: business day 6
FOLLOWING_MONDAY_NOON = datetime(2024, 1, 8, 17, 0, tzinfo=timezone.utc)

CHALLENGE_URL = "/api/staff/challenge/"


@pytest.fixture
def product(db):
    return create_challenge_product()


def enroll(staff_user, product, start_date=START, status=ChallengeAssignmentStatus.ACTIVE):
    return ChallengeAssignment.objects.create(
        staff_user=staff_user,
        product=product,
        start_date=start_date,
        status=status,
    )


def dashboard(staff_user, now=FOLLOWING_MONDAY_NOON):
    return services.get_staff_challenge(staff_user, now=now)


def lesson_dto(dto, day_number):
    return next(l for l in dto.lessons if l.day_number == day_number)


# =============================================================================
# PURE HELPERS
# =============================================================================


class TestSundayUnlock:
    def test_sunday_zero_has_no_gate(self):
        assert services.sunday_unlock_date(START, 0) is None
        assert services.is_sunday_unlocked(START, 0, START - timedelta(days=30))

    def test_sunday_n_opens_after_week_n(self):
        assert services.sunday_unlock_date(START, 1) == date(2024, 1, 7)
        assert services.sunday_unlock_date(START, 6) == date(2024, 2, 11)

    def test_boundary(self):
        assert not services.is_sunday_unlocked(START, 2, date(2024, 1, 13))
        assert services.is_sunday_unlocked(START, 2, date(2024, 1, 14))


class TestCore4Streak:
    def _entry(self, complete):
        return Core4Entry(
            body_completed=complete,
            being_completed=complete,
            balance_completed=complete,
            business_completed=True,
        )

    def test_counts_until_first_incomplete(self):
        entries = [self._entry(True), self._entry(True), self._entry(False), self._entry(True)]
        assert services.core4_streak(entries) == 2

    def test_incomplete_today_breaks_streak(self):
        assert services.core4_streak([self._entry(False), self._entry(True)]) == 0

    def test_empty(self):
        assert services.core4_streak([]) == 0


def test_lesson_day_derivation(product):
    lesson = ChallengeLesson.objects.get(product=product, day_number=6)
    assert (lesson.week_number, lesson.day_of_week) == (2, 1)

    lesson = ChallengeLesson.objects.get(product=product, day_number=30)
    assert (lesson.week_number, lesson.day_of_week) == (6, 5)


# =============================================================================
# DASHBOARD
# =============================================================================


@pytest.mark.django_db
class TestStaffChallenge:
    def test_lesson_gating(self, staff_user, product):
        enroll(staff_user, product)

        dto = dashboard(staff_user)

        assert dto.has_assignment is True
        assert dto.program_started is True
        assert dto.current_business_day == 6
        unlocked = [l.day_number for l in dto.lessons if l.progress.is_unlocked]
        assert unlocked == [1, 2, 3, 4, 5, 6]
        assert dto.todays_lesson.day_number == 6
        assert lesson_dto(dto, 6).progress.is_today is True

    def test_locked_lessons_hide_content(self, staff_user, product):
        enroll(staff_user, product)

        dto = dashboard(staff_user)

        locked = lesson_dto(dto, 7)
        assert locked.video_url is None
        assert locked.content_html is None
        assert locked.questions is None
        assert locked.progress.status == ChallengeProgressStatus.LOCKED

        unlocked = lesson_dto(dto, 6)
        assert unlocked.video_url == "https://vimeo.com/challenge/6"
        assert unlocked.questions == []
        assert unlocked.progress.status == ChallengeProgressStatus.AVAILABLE

    def test_discovery_unlock_dates(self, staff_user, product):
        enroll(staff_user, product)

        dto = dashboard(staff_user)

        assert lesson_dto(dto, 5).discovery_unlock_date == date(2024, 1, 5)
        assert lesson_dto(dto, 10).discovery_unlock_date == date(2024, 1, 12)
        assert lesson_dto(dto, 4).discovery_unlock_date is None

    def test_discovery_flow_completed_after_unlock(self, staff_user, product):
        enroll(staff_user, product)
        StaffFlowSession.objects.create(
            staff_user=staff_user,
            flow_slug=DISCOVERY_FLOW_SLUG,
            status=FlowSessionStatus.COMPLETED,
            completed_at=datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc),
        )

        dto = dashboard(staff_user)

        assert lesson_dto(dto, 5).progress.discovery_flow_completed is True
        assert lesson_dto(dto, 10).progress.discovery_flow_completed is False
        assert lesson_dto(dto, 4).progress.discovery_flow_completed is None

    def test_discovery_flow_before_unlock_does_not_count(self, staff_user, product):
        enroll(staff_user, product)
        # 22:00 on Thursday 2024-01-04 in New York, the day before lesson 5 unlocks
        StaffFlowSession.objects.create(
            staff_user=staff_user,
            flow_slug=DISCOVERY_FLOW_SLUG,
            status=FlowSessionStatus.COMPLETED,
            completed_at=datetime(2024, 1, 5, 3, 0, tzinfo=timezone.utc),
        )
        StaffFlowSession.objects.create(
            staff_user=staff_user,
            flow_slug=DISCOVERY_FLOW_SLUG,
            status=FlowSessionStatus.IN_PROGRESS,
        )
        StaffFlowSession.objects.create(
            staff_user=staff_user,
            flow_slug="onboarding",
            status=FlowSessionStatus.COMPLETED,
            completed_at=datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc),
        )

        dto = dashboard(staff_user)

        assert lesson_dto(dto, 5).progress.discovery_flow_completed is False

    def test_weekend_has_no_todays_lesson(self, staff_user, product):
        enroll(staff_user, product)
        # Saturday 2024-01-06, noon in New York
        dto = dashboard(staff_user, now=datetime(2024, 1, 6, 17, 0, tzinfo=timezone.utc))

        assert dto.current_business_day == 5
        assert dto.todays_lesson.day_number == 5

    def test_progress_totals(self, staff_user, product):
        assignment = enroll(staff_user, product)
        lesson = ChallengeLesson.objects.get(product=product, day_number=1)
        ChallengeProgress.objects.create(
            assignment=assignment,
            lesson=lesson,
            status=ChallengeProgressStatus.COMPLETED,
            reflection_response={"win": "Booked two appointments"},
        )

        dto = dashboard(staff_user)

        assert dto.progress.total_lessons == 30
        assert dto.progress.completed_lessons == 1
        assert dto.progress.progress_percent == 3
        first = lesson_dto(dto, 1)
        assert first.progress.status == ChallengeProgressStatus.COMPLETED
        assert first.progress.reflection_response == {"win": "Booked two appointments"}

    def test_modules_and_assignment(self, staff_user, product):
        enroll(staff_user, product)

        dto = dashboard(staff_user)

        assert [m.week_number for m in dto.modules] == [1, 2, 3, 4, 5, 6]
        assert dto.assignment.end_date == date(2024, 2, 11)
        assert dto.assignment.product.total_lessons == 30

    def test_sunday_modules(self, staff_user, product):
        assignment = enroll(staff_user, product)
        ChallengeSundayResponse.objects.create(
            assignment=assignment,
            sunday_number=0,
            commitment_body="Walk every morning",
            commitment_business="Ten quotes a day",
        )

        dto = dashboard(staff_user)

        sundays = {s.sunday_number: s for s in dto.sunday_modules}
        assert sundays[0].is_unlocked and sundays[0].is_completed
        assert sundays[0].previous_commitments is None
        assert sundays[1].is_unlocked is True
        assert sundays[1].is_completed is False
        assert sundays[1].previous_commitments.body == "Walk every morning"
        assert sundays[1].previous_commitments.business == "Ten quotes a day"
        assert sundays[2].is_unlocked is False
        assert sundays[2].previous_commitments is None

    def test_core4_summary(self, staff_user, product):
        enroll(staff_user, product)
        today = date(2024, 1, 8)
        for offset, complete in enumerate([True, True, False, True]):
            Core4Entry.objects.create(
                staff_user=staff_user,
                date=today - timedelta(days=offset),
                body_completed=complete,
                being_completed=complete,
                balance_completed=complete,
                business_completed=complete,
            )

        dto = dashboard(staff_user)

        assert dto.core4.streak == 2
        assert dto.core4.today.body is True
        assert dto.core4.today.business is True

    def test_core4_without_entry_today(self, staff_user, product):
        enroll(staff_user, product)
        Core4Entry.objects.create(staff_user=staff_user, date=date(2024, 1, 5), body_completed=True)

        dto = dashboard(staff_user)

        assert dto.core4.today.body is False
        assert dto.core4.streak == 0

    def test_pending_assignment(self, staff_user, product):
        enroll(staff_user, product, status=ChallengeAssignmentStatus.PENDING)

        dto = dashboard(staff_user)

        assert dto.has_assignment is True
        assert dto.program_started is False
        assert dto.current_business_day == 0
        assert not any(l.progress.is_unlocked for l in dto.lessons)
        assert dto.todays_lesson is None

    def test_completed_assignment_unlocks_all(self, staff_user, product):
        enroll(staff_user, product, status=ChallengeAssignmentStatus.COMPLETED)

        dto = dashboard(staff_user)

        assert all(l.progress.is_unlocked for l in dto.lessons)

    @pytest.mark.parametrize("status", [ChallengeAssignmentStatus.CANCELLED, ChallengeAssignmentStatus.PAUSED])
    def test_hidden_statuses(self, staff_user, product, status):
        enroll(staff_user, product, status=status)
        assert dashboard(staff_user).has_assignment is False

    def test_other_staff_assignment_ignored(self, staff_user, product, agency):
        colleague = StaffUser.objects.create(agency=agency, display_name="Colleague")
        enroll(colleague, product)

        assert dashboard(staff_user).has_assignment is False

    def test_timezone_from_assignment(self, staff_user, product):
        assignment = enroll(staff_user, product)
        # Sunday 22:00 in New York, already Monday in UTC
        now = datetime(2024, 1, 8, 3, 0, tzinfo=timezone.utc)

        assert dashboard(staff_user, now=now).current_business_day == 5

        assignment.timezone = "UTC"
        assignment.save()
        assert dashboard(staff_user, now=now).current_business_day == 6


# =============================================================================
# HTTP CONTRACT
# =============================================================================


@pytest.mark.django_db
class TestChallengeEndpoint:
    def test_not_enrolled(self, client, staff_headers):
        response = client.get(CHALLENGE_URL, headers=staff_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["has_assignment"] is False
        assert data["assignment"] is None

    def test_finished_window_unlocks_everything(self, client, staff_headers, staff_user, product):
        enroll(staff_user, product, start_date=today_in() - timedelta(days=400))

        data = client.get(CHALLENGE_URL, headers=staff_headers).json()

        assert data["has_assignment"] is True
        assert data["program_started"] is True
        assert all(l["progress"]["is_unlocked"] for l in data["lessons"])
        assert all(s["is_unlocked"] for s in data["sunday_modules"])
        assert data["assignment"]["product"]["slug"] == product.slug

    def test_before_start(self, client, staff_headers, staff_user, product):
        enroll(staff_user, product, start_date=today_in() + timedelta(days=30))

        data = client.get(CHALLENGE_URL, headers=staff_headers).json()

        assert data["program_started"] is False
        first = data["lessons"][0]
        assert first["progress"]["is_unlocked"] is False
        assert first["video_url"] is None
        assert data["sunday_modules"][0]["is_unlocked"] is True
        assert data["sunday_modules"][1]["is_unlocked"] is False

    def test_owner_forbidden(self, client, owner_headers):
        assert client.get(CHALLENGE_URL, headers=owner_headers).status_code == 403
