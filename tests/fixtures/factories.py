"""
Canonical builders for AgencyBrain tests.

USAGE:
    from tests.fixtures import create_sales_curriculum, create_sales_assignment

Dates: API tests cannot pin the clock, so they place start dates relative to
today_in(timezone) far enough away that the outcome does not depend on the
weekday the suite runs on. Service tests pass an explicit `now`.
"""

import time
from datetime import date

import jwt
from django.conf import settings

from agencybrain.challenge.models import (
    ChallengeLesson,
    ChallengeModule,
    ChallengeProduct,
    ChallengeSundayModule,
)
from agencybrain.sales_experience.enums import AssignmentStatus, Pillar
from agencybrain.sales_experience.models import (
    LESSON_DAYS,
    SalesExperienceAssignment,
    SalesExperienceLesson,
    SalesExperienceModule,
)
from agencybrain.scheduling import local_today

# 4 points total: 2 + 1 auto-graded, 1 open-ended
SAMPLE_QUIZ = [
    {
        "id": "q1",
        "question": "What comes first in the sales process?",
        "type": "multiple_choice",
        "options": ["Quote", "Discovery", "Close"],
        "correct_answer": "Discovery",
        "points": 2,
    },
    {
        "id": "q2",
        "question": "Should every call end with a next step?",
        "type": "multiple_choice",
        "options": ["Yes", "No"],
        "correct_answer": "Yes",
    },
    {
        "id": "q3",
        "question": "Describe how you will use this on your next call.",
        "type": "open_ended",
        "points": 1,
    },
]

# A short quote call: intro, the ask, a cross-sell, and a late mention of home
SAMPLE_SEGMENTS = [
    {"start": 0, "end": 4, "speaker": "agent", "text": "Thanks for calling, this is Dana."},
    {"start": 5, "end": 9, "speaker": "customer", "text": "I want a quote for my car insurance."},
    {"start": 10, "end": 14, "speaker": "agent", "text": "Do you also have homeowners coverage with anyone?"},
    {"start": 15, "end": 18, "speaker": "agent", "text": "Bundling home and car usually saves money."},
    {"start": 40, "end": 45, "speaker": "customer", "text": "My home policy renews next month."},
]

PILLARS = [Pillar.SALES_PROCESS, Pillar.ACCOUNTABILITY, Pillar.COACHING_CADENCE]


def make_supabase_jwt(sub: str, email: str | None = None, expires_in: int = 3600, **claims) -> str:
    """Sign a token the way Supabase Auth does (HS256, aud=authenticated)."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "aud": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def today_in(timezone_name: str = "America/New_York") -> date:
    return local_today(timezone_name)


def create_sales_curriculum(weeks: int = 8, quiz_on=((1, 5),)) -> dict[tuple[int, int], SalesExperienceLesson]:
    """
    Modules 1..weeks with a staff-visible lesson on Mon/Wed/Fri of each.

    quiz_on lists the (week, day) slots that carry SAMPLE_QUIZ.

    Returns:
        Lessons keyed by (week_number, day_of_week)
    """
    lessons = {}
    for week in range(1, weeks + 1):
        module = SalesExperienceModule.objects.create(
            week_number=week,
            title=f"Week {week}",
            pillar=PILLARS[(week - 1) % len(PILLARS)],
        )
        for day in LESSON_DAYS:
            lessons[(week, day)] = SalesExperienceLesson.objects.create(
                module=module,
                day_of_week=day,
                title=f"Week {week} Day {day}",
                video_url=f"https://vimeo.com/{week}{day}",
                content_html=f"<p>Lesson {week}.{day}</p>",
                quiz_questions=SAMPLE_QUIZ if (week, day) in quiz_on else [],
            )
    return lessons


def create_sales_assignment(
    agency,
    start_date: date,
    status: str = AssignmentStatus.ACTIVE,
    timezone: str = "America/New_York",
) -> SalesExperienceAssignment:
    assignment = SalesExperienceAssignment.objects.create(
        agency=agency,
        start_date=start_date,
        timezone=timezone,
        status=status,
    )
    assignment.refresh_from_db()
    return assignment


def create_challenge_product(lessons: int = 30, sundays: int = 7, weeks: int = 6) -> ChallengeProduct:
    """A product with `weeks` modules, `lessons` daily lessons and `sundays` Sunday modules."""
    product = ChallengeProduct.objects.create(
        name="The Challenge",
        slug=f"the-challenge-{ChallengeProduct.objects.count() + 1}",
        total_lessons=lessons,
        duration_weeks=weeks,
    )
    modules = {
        week: ChallengeModule.objects.create(product=product, name=f"Week {week}", week_number=week)
        for week in range(1, weeks + 1)
    }
    for day_number in range(1, lessons + 1):
        week = (day_number - 1) // 5 + 1
        ChallengeLesson.objects.create(
            product=product,
            module=modules.get(week),
            day_number=day_number,
            title=f"Day {day_number}",
            video_url=f"https://vimeo.com/challenge/{day_number}",
            content_html=f"<p>Day {day_number}</p>",
            is_discovery_flow=day_number % 5 == 0,
        )
    for sunday in range(sundays):
        ChallengeSundayModule.objects.create(
            product=product,
            sunday_number=sunday,
            title=f"Sunday {sunday}",
            has_rating_section=sunday > 0,
        )
    return product
