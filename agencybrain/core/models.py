"""
AgencyBrain account models.

Scoping hierarchy:
- Agency → has many Profiles (Supabase-authenticated owners/managers)
- Agency → has many TeamMembers (the roster)
- TeamMember → may have one StaffUser (staff-portal login)
- StaffUser → has many StaffSessions (custom bearer tokens)

Profiles authenticate with Supabase JWTs; StaffUsers authenticate with
session tokens issued by the staff portal. Both resolve to an agency.
"""

import uuid

from django.db import models
from django.utils import timezone

from .enums import FeatureKey, ProfileRole, TeamMemberRole


# =============================================================================
# ABSTRACT BASE CLASSES
# =============================================================================


class TimestampedModel(models.Model):
    """Abstract base class with created_at and updated_at timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# =============================================================================
# AGENCY
# =============================================================================


class Agency(TimestampedModel):
    """An insurance agency - the tenant boundary for all data."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    timezone = models.CharField(max_length=64, default="America/New_York")

    class Meta:
        db_table = "agencies"
        verbose_name_plural = "Agencies"

    def __str__(self):
        return self.name


class AgencyFeatureAccess(TimestampedModel):
    """Grants an agency access to a gated feature."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    agency = models.ForeignKey(
        Agency,
        on_delete=models.CASCADE,
        related_name="feature_access",
    )
    feature_key = models.CharField(max_length=64, choices=FeatureKey.choices)

    class Meta:
        db_table = "agency_feature_access"
        constraints = [
            models.UniqueConstraint(
                fields=["agency", "feature_key"],
                name="uniq_agency_feature",
            ),
        ]

    def __str__(self):
        return f"{self.agency} → {self.feature_key}"


# =============================================================================
# PEOPLE
# =============================================================================


class Profile(TimestampedModel):
    """
    Supabase-authenticated user.

    supabase_uid is the `sub` claim of the Supabase JWT.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    supabase_uid = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique identifier from Supabase Auth",
    )
    email = models.EmailField(blank=True)
    full_name = models.CharField(max_length=255, blank=True)
    agency = models.ForeignKey(
        Agency,
        on_delete=models.SET_NULL,
        related_name="profiles",
        null=True,
        blank=True,
    )
    role = models.CharField(
        max_length=32,
        choices=ProfileRole.choices,
        default=ProfileRole.OWNER,
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "profiles"

    def __str__(self):
        return self.email or self.supabase_uid


class TeamMember(TimestampedModel):
    """A person on an agency's roster."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    agency = models.ForeignKey(
        Agency,
        on_delete=models.CASCADE,
        related_name="team_members",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    role = models.CharField(
        max_length=32,
        choices=TeamMemberRole.choices,
        default=TeamMemberRole.SALES,
    )

    class Meta:
        db_table = "team_members"

    def __str__(self):
        return self.name

    @property
    def is_manager(self) -> bool:
        return self.role == TeamMemberRole.MANAGER


class StaffUser(TimestampedModel):
    """
    Staff-portal login.

    agency is set directly for standalone staff accounts; otherwise the
    agency is taken from the linked team member.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    agency = models.ForeignKey(
        Agency,
        on_delete=models.CASCADE,
        related_name="staff_users",
        null=True,
        blank=True,
    )
    team_member = models.ForeignKey(
        TeamMember,
        on_delete=models.SET_NULL,
        related_name="staff_users",
        null=True,
        blank=True,
    )
    display_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "staff_users"

    def __str__(self):
        return self.display_name or self.email or str(self.id)

    @property
    def effective_agency_id(self):
        """Agency from the team member first, then the direct link."""
        if self.team_member_id and self.team_member is not None:
            return self.team_member.agency_id
        return self.agency_id

    @property
    def contact_email(self) -> str:
        """Email for notifications: team member email, then login email."""
        if self.team_member is not None and self.team_member.email:
            return self.team_member.email
        return self.email


class StaffSessionQuerySet(models.QuerySet):
    def active(self, now=None):
        """Sessions that are still valid and not yet expired."""
        now = now or timezone.now()
        return self.filter(is_valid=True, expires_at__gt=now)


class StaffSession(TimestampedModel):
    """Bearer token issued to a staff user by the staff portal login."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff_user = models.ForeignKey(
        StaffUser,
        on_delete=models.CASCADE,
        related_name="sessions",
    )
    session_token = models.CharField(max_length=255, unique=True)
    is_valid = models.BooleanField(default=True)
    expires_at = models.DateTimeField()

    objects = StaffSessionQuerySet.as_manager()

    class Meta:
        db_table = "staff_sessions"
        indexes = [
            models.Index(fields=["session_token", "is_valid"], name="staff_session_token_valid_idx"),
        ]

    def __str__(self):
        return f"Session for {self.staff_user}"
