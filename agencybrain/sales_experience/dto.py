"""
Sales Experience DTOs.

Pydantic v2 models for the request/response shapes of the sales lesson,
lesson progress and quiz endpoints. Field names are the JSON contract the
staff portal and owner dashboard read; do not rename them.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .enums import AssignmentStatus, Pillar, ProgressStatus, QuestionType


# =============================================================================
# LESSON LISTING
# =============================================================================


class LessonProgressDTO(BaseModel):
    """Progress snapshot attached to every lesson in a listing."""
    status: ProgressStatus = ProgressStatus.LOCKED
    unlocked_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    video_watched_seconds: int = 0
    video_completed: bool = False
    quiz_score_percent: int | None = None
    quiz_feedback_ai: str | None = None
    quiz_completed_at: datetime | None = None


class LessonDTO(BaseModel):
    """
    A lesson as the caller may see it.

    video_url, content_html and quiz_questions are None until the lesson
    unlocks.
    """
    id: UUID
    module_id: UUID
    week_number: int
    day_of_week: int
    title: str
    description: str = ""
    video_url: str | None = None
    video_platform: str | None = None
    video_thumbnail_url: str | None = None
    content_html: str | None = None
    quiz_questions: list[dict[str, Any]] | None = None
    is_discovery_flow: bool = False
    is_unlocked: bool
    progress: LessonProgressDTO


class WeekDTO(BaseModel):
    week_number: int
    title: str
    description: str = ""
    pillar: Pillar
    icon: str = ""
    lessons: list[LessonDTO] = Field(default_factory=list)
    is_current: bool = False
    is_completed: bool = False


class AssignmentSummaryDTO(BaseModel):
    id: UUID
    status: AssignmentStatus
    start_date: date
    end_date: date
    timezone: str


class ProgressTotalsDTO(BaseModel):
    total_lessons: int = 0
    completed_lessons: int = 0
    progress_percent: int = 0


class LessonsOverviewDTO(BaseModel):
    """
    Response for GET /api/staff/sales-lessons/ and GET /api/sales-experience/.

    When there is no assignment only has_assignment and assignment are
    meaningful.
    """
    has_assignment: bool
    program_started: bool = False
    assignment: AssignmentSummaryDTO | None = None
    current_week: int = 1
    current_business_day: int = 0
    day_in_week: int = 0
    weeks: list[WeekDTO] = Field(default_factory=list)
    todays_lesson: LessonDTO | None = None
    progress: ProgressTotalsDTO = Field(default_factory=ProgressTotalsDTO)
    staff_name: str | None = None


# =============================================================================
# LESSON PROGRESS
# =============================================================================


class LessonProgressRequestDTO(BaseModel):
    """Request body for POST /api/staff/sales-lessons/progress/."""
    lesson_id: UUID
    action: str = Field(pattern=r"^(start|complete)$")
    video_watched_seconds: int | None = Field(default=None, ge=0)


class LessonProgressResponseDTO(BaseModel):
    success: bool = True
    lesson_id: UUID
    progress: LessonProgressDTO


# =============================================================================
# QUIZ
# =============================================================================


class QuizQuestionDTO(BaseModel):
    """One question as stored in SalesExperienceLesson.quiz_questions."""
    id: str | int
    question: str = ""
    type: str = QuestionType.OPEN_ENDED
    options: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    points: int | None = None

    @property
    def point_value(self) -> int:
        # Missing or zero points count as one
        return self.points or 1

    @property
    def is_auto_graded(self) -> bool:
        return self.type == QuestionType.MULTIPLE_CHOICE and bool(self.correct_answer)


class QuizAnswerDTO(BaseModel):
    question_id: str | int
    answer: str | None = None


class QuizSubmissionDTO(BaseModel):
    """Request body for POST /api/staff/sales-lessons/quiz/."""
    lesson_id: UUID
    answers: list[QuizAnswerDTO]


class GradedAnswerDTO(BaseModel):
    question_id: str | int
    question: str
    user_answer: str
    correct_answer: str | None = None
    is_correct: bool | None = None
    is_open_ended: bool = False
    points: int


class QuizResultDTO(BaseModel):
    """Response for POST /api/staff/sales-lessons/quiz/."""
    success: bool = True
    score_percent: int
    earned_points: int
    total_points: int
    attempt_number: int
    feedback_ai: str
    graded_answers: list[GradedAnswerDTO]
