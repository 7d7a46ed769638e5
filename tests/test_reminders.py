"""
Lesson reminder job tests.

Tests verify:
- 07:00 agency-local / Monday-Wednesday-Friday gating
- Lesson-for-date selection from the assignment start
- Recipient collection, deduplication and placeholder filtering
- At-most-once queueing per lesson and recipient
- Force-test mode
- Completion of assignments whose program window has ended
"""

from datetime import date, datetime, timezone
from uuid import uuid4

import pytest
from django.conf import settings

from agencybrain.core.enums import ProfileRole, TeamMemberRole
from agencybrain.core.exceptions import NotFoundError
from agencybrain.core.models import Profile, StaffUser, TeamMember
from agencybrain.sales_experience.enums import AssignmentStatus, RecipientType
from agencybrain.sales_experience.models import EmailQueueItem, EmailTemplate
from agencybrain.sales_experience.services import reminders_service
from tests.fixtures import create_sales_assignment, create_sales_curriculum

START = date(2024, 1, 1)
# 07:30 New York on Monday 2024-01-08: week 2, day 1
MONDAY_7AM_NY = datetime(2024, 1, 8, 12, 30, tzinfo=timezone.utc)
MONDAY_8AM_NY = datetime(2024, 1, 8, 13, 30, tzinfo=timezone.utc)
TUESDAY_7AM_NY = datetime(2024, 1, 9, 12, 30, tzinfo=timezone.utc)
# Friday of week 8, then the Monday after the program window
LAST_LESSON_7AM_NY = datetime(2024, 2, 23, 12, 30, tzinfo=timezone.utc)
AFTER_PROGRAM_7AM_NY = datetime(2024, 2, 26, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def lessons(db):
    return create_sales_curriculum()


@pytest.fixture
def assignment(agency, lessons):
    return create_sales_assignment(agency, START)


def make_profile(agency, role, email, name=""):
    return Profile.objects.create(
        supabase_uid=str(uuid4()),
        email=email,
        full_name=name,
        agency=agency,
        role=role,
    )


def run(now=MONDAY_7AM_NY, **kwargs):
    return reminders_service.queue_lesson_reminders(now=now, **kwargs)


# =============================================================================
# GATING
# =============================================================================


@pytest.mark.django_db
class TestGating:
    def test_queues_at_seven_on_lesson_day(self, assignment, lessons, staff_user):
        [outcome] = run()

        assert outcome.status == "queued"
        assert outcome.lesson_title == lessons[(2, 1)].title
        assert outcome.queued == 1

        item = EmailQueueItem.objects.get()
        assert item.lesson_id == lessons[(2, 1)].id
        assert item.template_key == "lesson_available"
        assert item.email_subject == "New Sales Training Lesson: Week 2 Day 1"
        assert item.scheduled_for == MONDAY_7AM_NY

    def test_skips_outside_seven(self, assignment, staff_user):
        [outcome] = run(now=MONDAY_8AM_NY)
        assert outcome.status == "skipped - not 7AM"
        assert not EmailQueueItem.objects.exists()

    def test_skips_non_lesson_day(self, assignment, staff_user):
        [outcome] = run(now=TUESDAY_7AM_NY)
        assert outcome.status == "skipped - not lesson day"

    def test_hour_is_agency_local(self, agency, lessons, staff_user):
        # 12:30 UTC is 06:30 in Chicago
        create_sales_assignment(agency, START, timezone="America/Chicago")

        [outcome] = run()

        assert outcome.status == "skipped - not 7AM"

    def test_skips_before_start(self, agency, lessons, staff_user):
        create_sales_assignment(agency, date(2024, 2, 5))
        [outcome] = run()
        assert outcome.status == "skipped - not started"

    def test_skips_when_no_lesson_scheduled(self, agency, staff_user):
        create_sales_curriculum(weeks=1)
        create_sales_assignment(agency, START)

        [outcome] = run()

        assert outcome.status == "skipped - no lesson today"

    def test_hidden_lessons_are_not_announced(self, assignment, lessons, staff_user):
        lesson = lessons[(2, 1)]
        lesson.is_staff_visible = False
        lesson.save()

        [outcome] = run()

        assert outcome.status == "skipped - no lesson today"

    def test_only_active_assignments(self, agency, lessons, staff_user):
        create_sales_assignment(agency, START, status=AssignmentStatus.PENDING)
        assert run() == []

    def test_missing_template_raises(self, assignment):
        EmailTemplate.objects.filter(template_key="lesson_available").update(is_active=False)
        with pytest.raises(NotFoundError):
            run()

    def test_last_lesson_day_keeps_assignment_active(self, assignment, lessons, staff_user):
        [outcome] = run(now=LAST_LESSON_7AM_NY)

        assert outcome.status == "queued"
        assert outcome.lesson_title == lessons[(8, 5)].title
        assignment.refresh_from_db()
        assert assignment.status == AssignmentStatus.ACTIVE

    def test_assignment_completed_after_program_window(self, assignment, staff_user):
        assert assignment.end_date == date(2024, 2, 25)

        [outcome] = run(now=AFTER_PROGRAM_7AM_NY)

        assert outcome.status == "completed - program ended"
        assert not EmailQueueItem.objects.exists()
        assignment.refresh_from_db()
        assert assignment.status == AssignmentStatus.COMPLETED
        assert run(now=AFTER_PROGRAM_7AM_NY) == []


def test_find_lesson_for_date_uses_calendar_offsets():
    class FakeModule:
        def __init__(self, week_number):
            self.week_number = week_number

    class FakeLesson:
        def __init__(self, week, day):
            self.module = FakeModule(week)
            self.day_of_week = day

    lessons = [(0, FakeLesson(1, 1)), (2, FakeLesson(1, 3)), (7, FakeLesson(2, 1))]

    assert reminders_service.find_lesson_for_date(START, date(2024, 1, 3), lessons) is lessons[1][1]
    assert reminders_service.find_lesson_for_date(START, date(2024, 1, 4), lessons) is None
    assert reminders_service.find_lesson_for_date(START, date(2024, 1, 4), lessons, upcoming=True) is lessons[2][1]


# =============================================================================
# RECIPIENTS
# =============================================================================


@pytest.mark.django_db
class TestRecipients:
    def test_collects_every_recipient_type(self, agency, staff_user):
        make_profile(agency, ProfileRole.OWNER, "owner@agency.test", "Olivia Owner")
        make_profile(agency, ProfileRole.KEY_EMPLOYEE, "key@agency.test")
        TeamMember.objects.create(
            agency=agency, name="Mia Manager", email="mia@agency.test", role=TeamMemberRole.MANAGER
        )

        recipients = {r.email: r for r in reminders_service.collect_recipients(agency.id)}

        assert set(recipients) == {"sam@agency.test", "owner@agency.test", "key@agency.test", "mia@agency.test"}
        assert recipients["sam@agency.test"].type == RecipientType.STAFF
        assert recipients["sam@agency.test"].name == "Sam"
        assert recipients["key@agency.test"].name == "Key Employee"
        assert recipients["mia@agency.test"].type == RecipientType.MANAGER

    def test_deduplicates_case_insensitively(self, agency, team_member, staff_user):
        make_profile(agency, ProfileRole.OWNER, "SAM@agency.test", "Sam as Owner")

        recipients = reminders_service.collect_recipients(agency.id)

        assert len(recipients) == 1
        assert recipients[0].type == RecipientType.OWNER

    def test_manager_does_not_replace_existing_recipient(self, agency, team_member, staff_user):
        team_member.role = TeamMemberRole.MANAGER
        team_member.save()

        recipients = reminders_service.collect_recipients(agency.id)

        assert len(recipients) == 1
        assert recipients[0].type == RecipientType.STAFF

    def test_skips_placeholder_and_inactive(self, agency):
        placeholder = TeamMember.objects.create(agency=agency, name="New Hire", email="hire@staff.placeholder")
        StaffUser.objects.create(agency=agency, team_member=placeholder, display_name="New Hire")
        retired = TeamMember.objects.create(agency=agency, name="Gone", email="gone@agency.test")
        StaffUser.objects.create(agency=agency, team_member=retired, is_active=False)
        owner = make_profile(agency, ProfileRole.OWNER, "former@agency.test")
        owner.is_active = False
        owner.save()

        assert reminders_service.collect_recipients(agency.id) == []

    def test_other_agency_excluded(self, agency, other_agency, staff_user):
        make_profile(other_agency, ProfileRole.OWNER, "elsewhere@agency.test")

        emails = [r.email for r in reminders_service.collect_recipients(agency.id)]

        assert emails == ["sam@agency.test"]

    def test_lesson_urls_by_recipient_type(self, assignment, staff_user, agency):
        make_profile(agency, ProfileRole.OWNER, "owner@agency.test")

        run()

        base = settings.APP_BASE_URL.rstrip("/")
        staff_item = EmailQueueItem.objects.get(recipient_email="sam@agency.test")
        owner_item = EmailQueueItem.objects.get(recipient_email="owner@agency.test")
        assert staff_item.variables_json["lesson_url"] == f"{base}/staff/sales-training/week/2"
        assert owner_item.variables_json["lesson_url"] == f"{base}/sales-experience/week/2"
        assert staff_item.variables_json["day_name"] == "Monday"
        assert staff_item.variables_json["week_number"] == "2"

    def test_no_recipients(self, assignment):
        [outcome] = run()
        assert outcome.status == "skipped - no recipients"


@pytest.mark.django_db
def test_rerun_does_not_queue_twice(assignment, staff_user):
    run()
    [outcome] = run()

    assert outcome.queued == 0
    assert EmailQueueItem.objects.count() == 1


# =============================================================================
# FORCE TEST
# =============================================================================


@pytest.mark.django_db
class TestForceTest:
    def test_requires_test_email(self, assignment):
        with pytest.raises(ValueError):
            run(force_test=True)

    def test_ignores_gates_and_picks_next_lesson(self, assignment, lessons, staff_user):
        [outcome] = run(now=TUESDAY_7AM_NY, force_test=True, test_email="qa@agency.test")

        assert outcome.lesson_title == lessons[(2, 3)].title
        item = EmailQueueItem.objects.get()
        assert item.recipient_email == "qa@agency.test"
        assert item.recipient_name == "Test User"

    def test_limits_to_agency(self, assignment, other_agency, lessons):
        create_sales_assignment(other_agency, START)

        outcomes = run(force_test=True, test_email="qa@agency.test", agency_id=assignment.agency_id)

        assert [o.assignment_id for o in outcomes] == [assignment.id]
