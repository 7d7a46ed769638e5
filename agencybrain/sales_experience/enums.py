"""
Sales Experience enums.

Django TextChoices, stored as lowercase snake_case strings.
"""

from django.db import models


class AssignmentStatus(models.TextChoices):
    """Lifecycle of an agency's enrollment in the program."""
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"


class ProgressStatus(models.TextChoices):
    """Per-lesson progress state. Only locked -> available is time-gated."""
    LOCKED = "locked", "Locked"
    AVAILABLE = "available", "Available"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"


class Pillar(models.TextChoices):
    """Curriculum pillar a week belongs to."""
    SALES_PROCESS = "sales_process", "Sales Process"
    ACCOUNTABILITY = "accountability", "Accountability"
    COACHING_CADENCE = "coaching_cadence", "Coaching Cadence"


class EmailStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    SENT = "sent", "Sent"
    FAILED = "failed", "Failed"


class RecipientType(models.TextChoices):
    STAFF = "staff", "Staff"
    OWNER = "owner", "Owner"
    KEY_EMPLOYEE = "key_employee", "Key Employee"
    MANAGER = "manager", "Manager"


class QuestionType(models.TextChoices):
    MULTIPLE_CHOICE = "multiple_choice", "Multiple Choice"
    OPEN_ENDED = "open_ended", "Open Ended"
