"""
Challenge DTOs.

Pydantic v2 models for GET /api/staff/challenge/. Field names are the JSON
contract the staff portal reads.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .enums import ChallengeAssignmentStatus, ChallengeProgressStatus


class ChallengeProductDTO(BaseModel):
    id: UUID
    name: str
    slug: str
    description: str = ""
    total_lessons: int
    duration_weeks: int


class ChallengeAssignmentDTO(BaseModel):
    id: UUID
    status: ChallengeAssignmentStatus
    start_date: date
    end_date: date
    timezone: str
    product: ChallengeProductDTO


class ChallengeModuleDTO(BaseModel):
    id: UUID
    name: str
    week_number: int
    description: str = ""
    icon: str = ""


class ChallengeLessonProgressDTO(BaseModel):
    status: ChallengeProgressStatus = ChallengeProgressStatus.LOCKED
    is_unlocked: bool = False
    is_today: bool = False
    unlocked_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    video_watched_seconds: int = 0
    video_completed: bool = False
    reflection_response: dict[str, Any] = Field(default_factory=dict)
    # Set on discovery-flow lessons only
    discovery_flow_completed: bool | None = None


class ChallengeLessonDTO(BaseModel):
    """
    A challenge lesson as the staff member may see it.

    video_url, content_html, questions and action_items are withheld until
    the lesson unlocks. discovery_unlock_date is set on discovery-flow
    lessons only; progress.discovery_flow_completed reports whether a
    discovery flow was completed on or after that date.
    """
    id: UUID
    title: str
    day_number: int
    week_number: int
    day_of_week: int
    preview_text: str = ""
    video_url: str | None = None
    video_thumbnail_url: str | None = None
    content_html: str | None = None
    questions: list[Any] | None = None
    action_items: list[Any] | None = None
    is_discovery_flow: bool = False
    discovery_unlock_date: date | None = None
    progress: ChallengeLessonProgressDTO


class ChallengeProgressTotalsDTO(BaseModel):
    total_lessons: int = 0
    completed_lessons: int = 0
    progress_percent: int = 0


class Core4DayDTO(BaseModel):
    body: bool = False
    being: bool = False
    balance: bool = False
    business: bool = False


class Core4SummaryDTO(BaseModel):
    today: Core4DayDTO = Field(default_factory=Core4DayDTO)
    streak: int = 0


class CommitmentsDTO(BaseModel):
    body: str | None = None
    being: str | None = None
    balance: str | None = None
    business: str | None = None


class SundayResponseDTO(BaseModel):
    id: UUID
    sunday_number: int
    rating_body: int | None = None
    rating_being: int | None = None
    rating_balance: int | None = None
    rating_business: int | None = None
    commitments: CommitmentsDTO
    final_reflection: str = ""
    submitted_at: datetime


class SundayModuleDTO(BaseModel):
    id: UUID
    sunday_number: int
    title: str
    description: str = ""
    video_url: str = ""
    has_rating_section: bool = False
    has_commitment_section: bool = True
    is_unlocked: bool
    is_completed: bool
    response: SundayResponseDTO | None = None
    previous_commitments: CommitmentsDTO | None = None


class ChallengeOverviewDTO(BaseModel):
    """Response for GET /api/staff/challenge/."""
    has_assignment: bool
    assignment: ChallengeAssignmentDTO | None = None
    program_started: bool = False
    current_business_day: int = 0
    todays_lesson: ChallengeLessonDTO | None = None
    modules: list[ChallengeModuleDTO] = Field(default_factory=list)
    lessons: list[ChallengeLessonDTO] = Field(default_factory=list)
    progress: ChallengeProgressTotalsDTO = Field(default_factory=ChallengeProgressTotalsDTO)
    core4: Core4SummaryDTO = Field(default_factory=Core4SummaryDTO)
    sunday_modules: list[SundayModuleDTO] = Field(default_factory=list)
