"""
Challenge enums.

Django TextChoices, stored as lowercase snake_case strings.
"""

from django.db import models


class ChallengeAssignmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    PAUSED = "paused", "Paused"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class ChallengeProgressStatus(models.TextChoices):
    """Per-lesson progress state. Only locked -> available is time-gated."""
    LOCKED = "locked", "Locked"
    AVAILABLE = "available", "Available"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"


# Assignments the staff portal still shows. Completed stays visible so the
# Sunday modules remain reachable after the last lesson.
VISIBLE_ASSIGNMENT_STATUSES = (
    ChallengeAssignmentStatus.ACTIVE,
    ChallengeAssignmentStatus.PENDING,
    ChallengeAssignmentStatus.COMPLETED,
)


class FlowSessionStatus(models.TextChoices):
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    ABANDONED = "abandoned", "Abandoned"
