"""
Sales Quiz Service.

Grades a staff quiz submission, records the attempt, marks the lesson
complete, generates coaching feedback and queues the notification emails.

Grading rules:
- multiple_choice with a correct_answer: case-insensitive exact match
- anything else is open-ended: full points for a non-blank answer
- a question without points is worth 1
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.html import format_html
from pydantic import ValidationError

from agencybrain.core.enums import ProfileRole
from agencybrain.core.exceptions import ServiceError
from agencybrain.core.models import Profile
from agencybrain.core.utils import round_percent
from agencybrain.integrations.llm_client import LLMCallError, LLMClient, get_default_client
from agencybrain.sales_experience.dto import (
    GradedAnswerDTO,
    QuizAnswerDTO,
    QuizQuestionDTO,
    QuizResultDTO,
    QuizSubmissionDTO,
)
from agencybrain.sales_experience.enums import ProgressStatus, RecipientType
from agencybrain.sales_experience.models import (
    EmailQueueItem,
    QuizAttempt,
    SalesExperienceAssignment,
    SalesExperienceLesson,
    StaffLessonProgress,
)

from .lessons_service import DEFAULT_STAFF_NAME, get_unlocked_staff_lesson

if TYPE_CHECKING:
    from agencybrain.core.models import StaffUser

logger = logging.getLogger(__name__)

QUIZ_FEEDBACK_FLOW = "quiz_feedback"


class NoQuizError(ServiceError):
    """Raised when a quiz is submitted for a lesson without questions."""

    code = "no_quiz"
    status = 400


# =============================================================================
# GRADING
# =============================================================================


def load_questions(lesson: SalesExperienceLesson) -> list[QuizQuestionDTO]:
    """Parse the lesson's stored questions, dropping malformed entries."""
    questions = []
    for raw in lesson.quiz_questions or []:
        try:
            questions.append(QuizQuestionDTO.model_validate(raw))
        except ValidationError:
            logger.warning("Skipping malformed quiz question on lesson %s: %r", lesson.id, raw)
    return questions


def grade_quiz(
    questions: list[QuizQuestionDTO],
    answers: list[QuizAnswerDTO],
) -> tuple[int, int, list[GradedAnswerDTO]]:
    """
    Grade answers against questions.

    Returns:
        (earned_points, total_points, graded_answers) in question order
    """
    by_question = {str(a.question_id): a.answer or "" for a in answers}

    earned = 0
    total = 0
    graded: list[GradedAnswerDTO] = []

    for question in questions:
        points = question.point_value
        total += points
        user_answer = by_question.get(str(question.id), "")

        if question.is_auto_graded:
            is_correct = user_answer.lower() == question.correct_answer.lower()
            if is_correct:
                earned += points
            graded.append(
                GradedAnswerDTO(
                    question_id=question.id,
                    question=question.question,
                    user_answer=user_answer,
                    correct_answer=question.correct_answer,
                    is_correct=is_correct,
                    points=points if is_correct else 0,
                )
            )
        else:
            has_answer = bool(user_answer.strip())
            if has_answer:
                earned += points
            graded.append(
                GradedAnswerDTO(
                    question_id=question.id,
                    question=question.question,
                    user_answer=user_answer,
                    is_open_ended=True,
                    points=points if has_answer else 0,
                )
            )

    return earned, total, graded


# =============================================================================
# FEEDBACK
# =============================================================================


def fallback_feedback(score_percent: int) -> str:
    if score_percent >= 80:
        return (
            f"Great job! You scored {score_percent}% on this quiz. "
            "You've demonstrated a solid understanding of the material."
        )
    if score_percent >= 60:
        return (
            f"Good effort! You scored {score_percent}%. "
            "Consider reviewing the areas where you missed questions."
        )
    return (
        f"You scored {score_percent}%. "
        "We recommend reviewing the lesson content and trying again."
    )


def build_feedback_prompt(
    lesson: SalesExperienceLesson,
    graded: list[GradedAnswerDTO],
    score_percent: int,
) -> str:
    qa_lines = []
    for index, answer in enumerate(graded, start=1):
        if answer.is_open_ended:
            verdict = "(Open-ended)"
        else:
            verdict = f"Correct: {'Yes' if answer.is_correct else 'No'}"
        qa_lines.append(
            f"Question {index}: {answer.question}\n"
            f"Staff Answer: {answer.user_answer}\n"
            f"{verdict}"
        )

    content_summary = ""
    if lesson.content_html:
        content_summary = f"Lesson Content Summary: {lesson.content_html[:500]}...\n"

    return (
        "You are a supportive sales coach providing feedback on a quiz submission.\n\n"
        f"Lesson: {lesson.title}\n"
        f"{content_summary}\n"
        f"Quiz Results (Score: {score_percent}%):\n"
        + "\n\n".join(qa_lines)
        + "\n\nProvide brief, encouraging feedback (2-3 sentences) that:\n"
        "1. Acknowledges their effort and score\n"
        "2. Highlights what they understood well OR areas to review\n"
        "3. Connects back to the practical sales application\n\n"
        "Keep it conversational and motivating. Don't list every question - "
        "focus on overall understanding."
    )


def generate_feedback(
    lesson: SalesExperienceLesson,
    graded: list[GradedAnswerDTO],
    score_percent: int,
    agency_id: UUID | None,
    client: LLMClient | None = None,
) -> str:
    """
    Coaching feedback from the LLM, or the score-band fallback.

    Never raises: a disabled, failing or empty LLM response falls back.
    """
    client = client or get_default_client()
    if not client.enabled:
        return fallback_feedback(score_percent)

    try:
        response = client.call(
            agency_id=agency_id,
            flow=QUIZ_FEEDBACK_FLOW,
            prompt=build_feedback_prompt(lesson, graded, score_percent),
            role="fast",
        )
    except LLMCallError as exc:
        logger.warning("Quiz feedback generation failed, using fallback: %s", exc)
        return fallback_feedback(score_percent)

    return response.raw_text.strip() or fallback_feedback(score_percent)


# =============================================================================
# NOTIFICATIONS
# =============================================================================


def queue_quiz_emails(
    assignment: SalesExperienceAssignment,
    staff_user: StaffUser,
    lesson: SalesExperienceLesson,
    score_percent: int,
    feedback: str,
    now: datetime,
) -> int:
    """
    Queue the owner notification and the staff result email.

    Returns the number of rows queued. Failures are logged, not raised.
    """
    staff_name = staff_user.display_name or DEFAULT_STAFF_NAME
    variables = {
        "staff_name": staff_name,
        "lesson_title": lesson.title,
        "score": str(score_percent),
        "feedback_ai": feedback,
    }
    items = []

    owner = (
        Profile.objects.filter(
            agency_id=assignment.agency_id,
            role=ProfileRole.OWNER,
            is_active=True,
        )
        .exclude(email="")
        .order_by("created_at")
        .first()
    )
    if owner is not None:
        items.append(
            EmailQueueItem(
                assignment=assignment,
                template_key="quiz_completed",
                recipient_email=owner.email,
                recipient_name=owner.full_name,
                recipient_type=RecipientType.OWNER,
                scheduled_for=now,
                email_subject=f"{staff_name} completed a quiz",
                email_body_html=format_html(
                    "<p>Hi {},</p>"
                    "<p><strong>{}</strong> just completed a quiz in the 8 Week Sales Experience.</p>"
                    "<p><strong>Lesson:</strong> {}</p>"
                    "<p><strong>Score:</strong> {}%</p>"
                    "<p>Log in to see their progress and detailed results.</p>",
                    owner.full_name or "there",
                    staff_name,
                    lesson.title,
                    score_percent,
                ),
                variables_json=variables,
            )
        )

    staff_email = staff_user.contact_email
    if staff_email:
        items.append(
            EmailQueueItem(
                assignment=assignment,
                template_key="quiz_result",
                recipient_email=staff_email,
                recipient_name=staff_user.display_name,
                recipient_type=RecipientType.STAFF,
                scheduled_for=now,
                email_subject=f"Your quiz results: {lesson.title}",
                email_body_html=format_html(
                    "<p>Hi {},</p>"
                    "<p>You scored <strong>{}%</strong> on the quiz for \"{}\".</p>"
                    "<p><strong>Feedback:</strong></p>"
                    "<p>{}</p>"
                    "<p>Keep up the great work with your sales training!</p>",
                    staff_user.display_name or "there",
                    score_percent,
                    lesson.title,
                    feedback,
                ),
                variables_json=variables,
            )
        )

    try:
        with transaction.atomic():
            EmailQueueItem.objects.bulk_create(items)
    except DatabaseError:
        logger.exception("Failed to queue quiz emails for assignment %s", assignment.id)
        return 0

    return len(items)


# =============================================================================
# SUBMISSION
# =============================================================================


def submit_quiz(
    staff_user: StaffUser,
    agency_id: UUID | None,
    submission: QuizSubmissionDTO,
    now: datetime | None = None,
    llm_client: LLMClient | None = None,
) -> QuizResultDTO:
    """
    Grade and record a quiz submission.

    Raises:
        NotFoundError: no assignment, or unknown lesson
        NoQuizError: the lesson has no questions
        LessonLockedError: the lesson has not unlocked yet
    """
    now = now or timezone.now()
    assignment, lesson = get_unlocked_staff_lesson(agency_id, submission.lesson_id, now=now)

    questions = load_questions(lesson)
    if not questions:
        raise NoQuizError("This lesson has no quiz")

    earned, total, graded = grade_quiz(questions, submission.answers)
    score_percent = round_percent(earned, total)

    attempt_number = (
        QuizAttempt.objects.filter(
            assignment=assignment,
            staff_user=staff_user,
            lesson=lesson,
        ).count()
        + 1
    )

    feedback = generate_feedback(lesson, graded, score_percent, agency_id, client=llm_client)

    with transaction.atomic():
        QuizAttempt.objects.create(
            assignment=assignment,
            staff_user=staff_user,
            lesson=lesson,
            attempt_number=attempt_number,
            answers_json=[g.model_dump(mode="json") for g in graded],
            score_percent=score_percent,
            feedback_ai=feedback,
            completed_at=now,
        )

        progress, _ = StaffLessonProgress.objects.get_or_create(
            assignment=assignment,
            staff_user=staff_user,
            lesson=lesson,
            defaults={"unlocked_at": now, "started_at": now},
        )
        progress.status = ProgressStatus.COMPLETED
        progress.quiz_score_percent = score_percent
        progress.quiz_feedback_ai = feedback
        progress.quiz_completed_at = now
        progress.completed_at = now
        progress.save()

    queue_quiz_emails(assignment, staff_user, lesson, score_percent, feedback, now)

    logger.info(
        "Quiz submitted: staff=%s lesson=%s attempt=%d score=%d",
        staff_user.id,
        lesson.id,
        attempt_number,
        score_percent,
    )

    return QuizResultDTO(
        score_percent=score_percent,
        earned_points=earned,
        total_points=total,
        attempt_number=attempt_number,
        feedback_ai=feedback,
        graded_answers=graded,
    )
