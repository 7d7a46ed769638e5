"""
AgencyBrain account enums.

All enums are Django TextChoices stored as lowercase snake_case strings.
"""

from django.db import models


class ProfileRole(models.TextChoices):
    """Role of a Supabase-authenticated user within their agency."""
    OWNER = "owner", "Agency Owner"
    KEY_EMPLOYEE = "key_employee", "Key Employee"
    MANAGER = "manager", "Manager"
    ADMIN = "admin", "Platform Admin"


class TeamMemberRole(models.TextChoices):
    """Role of a team member on the agency roster."""
    SALES = "sales", "Sales"
    SERVICE = "service", "Service"
    HYBRID = "hybrid", "Hybrid"
    MANAGER = "manager", "Manager"


class FeatureKey(models.TextChoices):
    """Per-agency feature flags."""
    CALL_SCORING_QA = "call_scoring_qa", "Call Scoring Q&A"
    SALES_EXPERIENCE = "sales_experience", "8-Week Sales Experience"
    CHALLENGE = "challenge", "6-Week Challenge"
